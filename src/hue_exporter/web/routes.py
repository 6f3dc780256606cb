"""Metrics and health routes"""

import logging
import time
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from hue_exporter.context import AppContext

logger = logging.getLogger(__name__)
router = APIRouter()


def _get_context(request: Request) -> AppContext:
    return request.app.state.context


@router.get("/metrics", include_in_schema=False)
def metrics(request: Request) -> Response:
    """
    Expose all current observations in the Prometheus text format.

    Declared as a plain function so FastAPI runs it in its thread pool:
    direct collectors fetch from their upstream while rendering.
    """
    registry = _get_context(request).registry
    return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    """Report the state of every background refresh loop."""
    context = _get_context(request)
    now = time.time()

    sources = {}
    for loop in context.loops:
        status = loop.status().to_dict()
        updated_at = loop.cache.updated_at
        status["cache_age"] = None if updated_at is None else now - updated_at
        sources[loop.name] = status

    return {
        "status": "healthy" if context.is_started else "starting",
        "collectors": [collector.source_id for collector in context.collectors],
        "sources": sources,
    }

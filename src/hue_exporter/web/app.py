"""FastAPI application serving the metrics endpoint."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from hue_exporter import __version__
from hue_exporter.context import AppContext

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan.

    The refresh loops are owned and started by the AppContext, not here;
    the CLI starts the context before the server accepts requests.
    """
    context: AppContext = app.state.context
    if not context.is_started:
        logger.warning("AppContext not started - cached sources will stay empty")
    logger.info(f"Serving metrics from {len(context.collectors)} collector(s)")

    yield

    logger.info("Web application shutting down...")


def create_app(context: AppContext) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        context: Application context whose registry is served on /metrics

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Hue Exporter",
        description="Prometheus exporter for Hue sensors, weather and index quotes",
        version=__version__,
        lifespan=lifespan,
    )

    # Store context in app.state for access in request handlers
    app.state.context = context

    from hue_exporter.web.routes import router

    app.include_router(router)

    logger.info("FastAPI application created")
    return app

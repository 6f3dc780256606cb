"""
Base pieces shared by all upstream clients.

An upstream client issues a single blocking request to one external HTTP
source and decodes the response into readings. Clients do NOT cache data -
the refresh loops and the metric cache handle that. Every failure is surfaced
as an UpstreamError subclass so the caller can skip the cycle.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Optional

import httpx

from . import __version__
from .exceptions import (
    UpstreamConnectionError,
    UpstreamDecodeError,
    UpstreamError,
    UpstreamStatusError,
    UpstreamTimeoutError,
)
from .log import get_structured_logger

logger = get_structured_logger(__name__, component="upstream")

DEFAULT_TIMEOUT = 10.0
USER_AGENT = f"hue-exporter/{__version__}"


@dataclass(frozen=True)
class Reading:
    """
    A single measurement taken from an upstream source.

    Attributes:
        sensor_id: Identifier of the entity within its source (e.g., Hue bridge id)
        name: Name reported by the source (e.g., "Kitchen")
        value: Raw numeric value in the source's unit
        unit: Unit of ``value`` (e.g., "cC" for hundredths of a degree Celsius)
        kind: Optional source-specific type tag (e.g., "ZLLTemperature")
        timestamp: When the source says the value was measured, if known
        metadata: Additional context about the reading (read-only)
    """

    sensor_id: str
    name: str
    value: float
    unit: Optional[str] = None
    kind: Optional[str] = None
    timestamp: Optional[datetime] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))


class HTTPUpstreamClient:
    """
    Blocking HTTP client for one upstream source.

    Owns an ``httpx.Client`` with a fixed timeout so a hung upstream cannot
    stall its refresh loop. A preconfigured client, or a transport for the
    owned client, may be injected instead.
    """

    source_id = "upstream"

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
            transport=transport,
        )

    def _get(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        """
        Perform one GET request.

        Raises:
            UpstreamTimeoutError: The request exceeded the timeout
            UpstreamConnectionError: The upstream could not be reached
            UpstreamStatusError: The upstream answered with a non-2xx status
        """
        try:
            response = self._client.get(url, params=params, headers=headers, timeout=self.timeout)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(self.source_id, f"timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise UpstreamConnectionError(self.source_id, str(e) or type(e).__name__) from e

        if not response.is_success:
            raise UpstreamStatusError(self.source_id, response.status_code)

        logger.debug("Upstream request succeeded", source=self.source_id, status=response.status_code)
        return response

    def _get_json(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """Perform one GET request and decode the JSON body"""
        response = self._get(url, params=params, headers=headers)
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamDecodeError(self.source_id, f"invalid JSON body: {e}") from e

    def close(self) -> None:
        """Close the HTTP client if this instance created it"""
        if self._owns_client:
            self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = [
    "DEFAULT_TIMEOUT",
    "HTTPUpstreamClient",
    "Reading",
    "UpstreamError",
]

"""Exception hierarchy for hue-exporter"""

from typing import Optional


class ExporterError(Exception):
    """Base class for all hue-exporter errors"""


class ConfigError(ExporterError):
    """Invalid or missing configuration. Fatal at startup."""


class UpstreamError(ExporterError):
    """
    A single request to an upstream source failed.

    Raised by the upstream clients and caught at the refresh loop or collector
    boundary, where the cycle (or scrape) for that source is skipped.

    Attributes:
        source: Identifier of the upstream source (e.g., "hue", "weather")
    """

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source


class UpstreamTimeoutError(UpstreamError):
    """The upstream did not answer within the configured timeout"""


class UpstreamConnectionError(UpstreamError):
    """The upstream could not be reached"""


class UpstreamStatusError(UpstreamError):
    """The upstream answered with a non-success status code"""

    def __init__(self, source: str, status_code: int, message: Optional[str] = None):
        super().__init__(source, message or f"unexpected status {status_code}")
        self.status_code = status_code


class UpstreamDecodeError(UpstreamError):
    """The upstream response body could not be decoded into a reading"""

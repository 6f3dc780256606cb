"""Logging setup and structured logging helpers"""

import logging
import sys
from collections.abc import MutableMapping
from typing import Any, Optional

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that supports structured logging with extra fields.

    Usage:
        logger = get_structured_logger(__name__, component="weather")
        logger.warning("Refresh failed", source="weather", error="timeout")
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        """Move non-standard kwargs into ``extra`` and render them after the message."""
        standard_kwargs = {"exc_info", "stack_info", "stacklevel", "extra"}
        extra = kwargs.pop("extra", {})

        for key in list(kwargs.keys()):
            if key not in standard_kwargs:
                extra[key] = kwargs.pop(key)

        if self.extra:
            extra = {**self.extra, **extra}

        kwargs["extra"] = extra
        if extra:
            fields = " ".join(f"{k}={v}" for k, v in extra.items())
            msg = f"{msg} [{fields}]"
        return msg, kwargs


def get_structured_logger(name: str, **default_extra: Any) -> StructuredLoggerAdapter:
    """
    Get a structured logger that supports extra keyword arguments.

    Args:
        name: Logger name (usually __name__)
        **default_extra: Default extra fields to include in all logs

    Returns:
        A StructuredLoggerAdapter instance
    """
    base_logger = logging.getLogger(name)
    return StructuredLoggerAdapter(base_logger, default_extra)


def setup_logging(level: str, log_file: Optional[str] = None) -> None:
    """Configure logging handlers"""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    # Add file handler if log file is specified and writable
    if log_file:
        try:
            handlers.append(logging.FileHandler(log_file))
        except (PermissionError, FileNotFoundError):
            print(
                f"Warning: Cannot write to {log_file}, logging to stderr only",
                file=sys.stderr,
            )

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

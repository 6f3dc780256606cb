"""
Metric cache shared between a refresh loop and scrape requests.

A cache holds the last successfully fetched value of one source. The refresh
loop is the only writer; scrape requests read it from the HTTP server's
worker threads. A write replaces the whole value under the lock, so a reader
always sees the value of exactly one write.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CachedValue(Generic[T]):
    """Container for a cached value with the time it was written."""

    data: T
    timestamp: float = field(default_factory=time.time)


class MetricCache(Generic[T]):
    """
    Last-known value of one data source.

    There is no expiry: a stale value is served until the next successful
    refresh replaces it.
    """

    def __init__(self, name: str, initial: Optional[T] = None):
        """
        Initialize the cache.

        Args:
            name: Name of the owning source, used in logs
            initial: Value returned by read() until the first write
        """
        self.name = name
        self._initial = initial
        self._entry: Optional[CachedValue[T]] = None
        self._lock = threading.Lock()

    def write(self, value: T) -> None:
        """Replace the stored value."""
        entry = CachedValue(value)
        with self._lock:
            self._entry = entry
        logger.debug(f"Cache updated: {self.name}")

    def read(self) -> Optional[T]:
        """Return the last written value, or the initial value if none yet."""
        with self._lock:
            entry = self._entry
        return self._initial if entry is None else entry.data

    @property
    def has_value(self) -> bool:
        with self._lock:
            return self._entry is not None

    @property
    def updated_at(self) -> Optional[float]:
        """Unix time of the last write, or None if never written."""
        with self._lock:
            return None if self._entry is None else self._entry.timestamp

    def __repr__(self) -> str:
        return f"MetricCache(name={self.name!r}, has_value={self.has_value})"

"""
Background refresh loops.

One loop per cached source: every ``interval`` seconds it calls the source's
blocking fetch function in a worker thread and writes the result into the
source's MetricCache. A failed cycle is logged and skipped, leaving the last
known value in place.
"""

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable
from dataclasses import asdict, dataclass
from typing import Any, Generic, Optional, TypeVar

from .cache import MetricCache
from .exceptions import UpstreamError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RefreshStatus:
    """Snapshot of a refresh loop's health."""

    name: str
    interval: float
    running: bool
    last_attempt: Optional[float]
    last_success: Optional[float]
    last_error: Optional[str]
    consecutive_failures: int
    successes: int
    failures: int

    @property
    def up(self) -> Optional[bool]:
        """Whether the last finished attempt succeeded; None until one finishes."""
        if self.last_attempt is None:
            return None
        return self.consecutive_failures == 0

    def to_dict(self) -> dict[str, Any]:
        return {**asdict(self), "up": self.up}


class RefreshLoop(Generic[T]):
    """
    Periodically refreshes one MetricCache from one upstream fetch function.

    Construction has no side effects; call start() from a running event loop.
    The first fetch happens immediately so the cache is populated before the
    first scrape if the upstream answers in time.
    """

    def __init__(
        self,
        name: str,
        fetch: Callable[[], T],
        cache: MetricCache[T],
        interval: float,
    ):
        """
        Initialize the refresh loop.

        Args:
            name: Source name, used in logs and status
            fetch: Blocking function returning a fresh value (raises UpstreamError on failure)
            cache: Cache written on every successful fetch
            interval: Seconds between the starts of two consecutive fetches
        """
        if interval <= 0:
            raise ValueError(f"Refresh interval must be > 0, got {interval}")
        self.name = name
        self.interval = interval
        self.cache = cache
        self._fetch = fetch
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

        self._last_attempt: Optional[float] = None
        self._last_success: Optional[float] = None
        self._last_error: Optional[str] = None
        self._consecutive_failures = 0
        self._successes = 0
        self._failures = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> bool:
        """
        Run a single refresh cycle.

        Returns:
            True if the cache was updated, False if the cycle was skipped
        """
        try:
            value = await asyncio.to_thread(self._fetch)
        except UpstreamError as e:
            self._last_attempt = time.time()
            self._record_failure(str(e))
            logger.warning(f"Refresh of {self.name} failed, keeping last value: {e}")
            return False
        except Exception as e:
            self._last_attempt = time.time()
            self._record_failure(f"{type(e).__name__}: {e}")
            logger.error(f"Unexpected error refreshing {self.name}: {e}", exc_info=True)
            return False

        self.cache.write(value)
        self._last_attempt = self._last_success = time.time()
        self._last_error = None
        self._consecutive_failures = 0
        self._successes += 1
        logger.debug(f"Refreshed {self.name}")
        return True

    def _record_failure(self, message: str) -> None:
        self._last_error = message
        self._consecutive_failures += 1
        self._failures += 1

    async def _run(self) -> None:
        """Loop until stopped: fetch, then wait for the rest of the interval."""
        assert self._stop_event is not None
        logger.info(f"Refresh loop for {self.name} started (interval {self.interval}s)")

        while not self._stop_event.is_set():
            cycle_start = time.monotonic()
            await self.run_once()

            elapsed = time.monotonic() - cycle_start
            wait_time = max(0.0, self.interval - elapsed)
            if wait_time > 0:
                with contextlib.suppress(asyncio.TimeoutError):
                    await asyncio.wait_for(self._stop_event.wait(), timeout=wait_time)

        logger.info(f"Refresh loop for {self.name} stopped")

    def start(self) -> asyncio.Task:
        """
        Schedule the loop on the running event loop.

        Returns:
            The task running the loop (the cancellation handle)
        """
        if self._task is not None and not self._task.done():
            logger.warning(f"Refresh loop for {self.name} already running")
            return self._task

        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(), name=f"refresh-{self.name}")
        return self._task

    async def stop(self, timeout: float = 5.0) -> None:
        """Stop the loop, cancelling it if it does not finish within ``timeout``."""
        if self._task is None or self._task.done():
            return

        assert self._stop_event is not None
        self._stop_event.set()
        try:
            await asyncio.wait_for(asyncio.shield(self._task), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Refresh loop for {self.name} did not stop gracefully, cancelling")
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    def status(self) -> RefreshStatus:
        return RefreshStatus(
            name=self.name,
            interval=self.interval,
            running=self.is_running,
            last_attempt=self._last_attempt,
            last_success=self._last_success,
            last_error=self._last_error,
            consecutive_failures=self._consecutive_failures,
            successes=self._successes,
            failures=self._failures,
        )

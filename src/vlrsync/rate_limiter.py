"""Shared request pacing for every vlr.gg fetch.

The scanner, its detail fetches and all live trackers go through one
VLRClient, so a single RateLimiter spaces every request the process
makes. The gap between two requests is a jittered multiple of the
current delay; the delay grows when vlr.gg throttles or errors and
shrinks back towards ``min_delay`` as requests succeed.
"""

import asyncio
import logging
import random
import time

from vlrsync.config import SyncConfig

logger = logging.getLogger(__name__)

# Upper bound of the jitter window, as a multiple of the current delay.
JITTER_CEILING = 1.5


class RateLimiter:
    """Adaptive, jittered spacing between outbound requests.

    ``wait()`` holds a lock while sleeping, so concurrent callers are
    released one at a time. Time spent since the previous request counts
    toward the gap.
    """

    def __init__(self, config: SyncConfig | None = None):
        config = config or SyncConfig()
        self._floor = config.min_delay
        self._ceiling = config.max_backoff
        self._grow = config.backoff_factor
        self._shrink = config.recovery_factor
        self._current_delay = config.min_delay
        self._last_request_time: float = 0.0
        self._lock = asyncio.Lock()
        self.backoffs = 0

    @property
    def current_delay(self) -> float:
        """Base delay in seconds before jitter."""
        return self._current_delay

    @property
    def throttled(self) -> bool:
        """True while the delay sits above its floor."""
        return self._current_delay > self._floor

    async def wait(self) -> float:
        """Block until this request may go out.

        Returns:
            The jittered gap chosen for this request.
        """
        async with self._lock:
            gap = random.uniform(self._current_delay, self._current_delay * JITTER_CEILING)
            remaining = gap - (time.monotonic() - self._last_request_time)
            if remaining > 0:
                await asyncio.sleep(remaining)
            self._last_request_time = time.monotonic()
            return gap

    def backoff(self) -> None:
        """Widen the gap after a 429 or 5xx answer."""
        self.backoffs += 1
        self._current_delay = min(self._current_delay * self._grow, self._ceiling)
        logger.warning(
            "vlr.gg is pushing back (%d backoffs), request delay now %.1fs",
            self.backoffs, self._current_delay,
        )

    def recover(self) -> None:
        """Narrow the gap after a successful request."""
        if self.throttled:
            self._current_delay = max(self._current_delay * self._shrink, self._floor)
            if not self.throttled:
                logger.info("Request delay back to %.2fs", self._floor)

    def reset(self) -> None:
        self._current_delay = self._floor

"""Per-match live pollers and the registry that owns them.

A Tracker re-fetches one live match every ``interval`` seconds and
writes the detail record only when it changed since its last confirmed
write. It never stops itself: the Scanner's reconcile step is the only
thing that removes a Tracker, so liveness has a single source of truth.

Lifecycle::

    Active --stop()--> Stopped

A stopped Tracker is never restarted. When the match goes live again
the registry builds a fresh instance with an empty snapshot.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, Mapping

from vlrsync.changes import Snapshot
from vlrsync.exceptions import StoreError
from vlrsync.models import MatchDetail

logger = logging.getLogger(__name__)

FetchDetail = Callable[[str, str], Awaitable[MatchDetail | None]]


class Tracker:
    """Repeating fetch + diff + write task for a single live match."""

    def __init__(
        self,
        match_id: str,
        url: str,
        fetch_detail: FetchDetail,
        gateway,
        interval: float = 30.0,
    ) -> None:
        self.match_id = match_id
        self.url = url
        self.interval = interval
        self._fetch_detail = fetch_detail
        self._gateway = gateway
        self._snapshot = Snapshot()
        self._stop = asyncio.Event()
        self._task: asyncio.Task | None = None

        self.ticks = 0
        self.writes = 0

    @property
    def active(self) -> bool:
        return self._task is not None and not self._stop.is_set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    @property
    def task(self) -> asyncio.Task | None:
        return self._task

    def start(self) -> None:
        """Tick immediately, then every ``interval`` seconds until stopped."""
        if self._stop.is_set():
            raise RuntimeError(f"Tracker {self.match_id} was stopped and cannot restart")
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(
                self._run(), name=f"tracker-{self.match_id}"
            )
            logger.info("[Tracker:%s] Started (every %.0fs)", self.match_id, self.interval)

    def stop(self) -> None:
        """Cancel the task and discard the snapshot. Safe to call twice."""
        if self._stop.is_set():
            return
        self._stop.set()
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._snapshot.clear()
        logger.info("[Tracker:%s] Stopped after %d ticks", self.match_id, self.ticks)

    async def wait_stopped(self) -> None:
        """Wait for a stopped tracker's task to unwind."""
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)

    async def _run(self) -> None:
        while not self._stop.is_set():
            try:
                await self.tick()
            except Exception:
                logger.exception("[Tracker:%s] Tick failed", self.match_id)
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass

    async def tick(self) -> bool:
        """Run one poll. Returns True when a write happened."""
        self.ticks += 1
        detail = await self._fetch_detail(self.match_id, self.url)
        if detail is None:
            logger.info("[Tracker:%s] No data this tick", self.match_id)
            return False

        if not self._snapshot.has_changed(detail):
            logger.debug("[Tracker:%s] Unchanged, skipping write", self.match_id)
            return False

        try:
            result = await self._gateway.upsert_detail(detail)
        except StoreError as exc:
            logger.error("[Tracker:%s] Write failed: %s", self.match_id, exc)
            return False

        if self._stop.is_set():
            return True
        self._snapshot.accept(detail)
        self.writes += 1
        logger.info("[Tracker:%s] Synced detail (%s, status=%s)", self.match_id, result, detail.status)
        if detail.status != "live":
            logger.info(
                "[Tracker:%s] Match is now %s; scanner will stop this tracker",
                self.match_id, detail.status,
            )
        return True


TrackerFactory = Callable[[str, str], Tracker]


class TrackerRegistry:
    """Id -> Tracker map holding at most one tracker per match id."""

    def __init__(self, factory: TrackerFactory) -> None:
        self._factory = factory
        self._trackers: dict[str, Tracker] = {}

    def __len__(self) -> int:
        return len(self._trackers)

    def __contains__(self, match_id: object) -> bool:
        return match_id in self._trackers

    def get(self, match_id: str) -> Tracker | None:
        return self._trackers.get(match_id)

    @property
    def active_ids(self) -> set[str]:
        return set(self._trackers)

    def ensure(self, match_id: str, url: str) -> bool:
        """Start a tracker for ``match_id`` unless one exists.

        Returns:
            True if a new tracker was started.
        """
        if match_id in self._trackers:
            return False
        tracker = self._factory(match_id, url)
        self._trackers[match_id] = tracker
        tracker.start()
        return True

    def stop(self, match_id: str) -> bool:
        """Stop and forget the tracker for ``match_id``, if any."""
        tracker = self._trackers.pop(match_id, None)
        if tracker is None:
            return False
        tracker.stop()
        return True

    def reconcile(self, live: Mapping[str, str]) -> tuple[list[str], list[str]]:
        """Make the active set equal the ids of ``live`` (id -> url).

        Returns:
            (started ids, stopped ids)
        """
        stopped = [mid for mid in list(self._trackers) if mid not in live]
        for match_id in stopped:
            self.stop(match_id)
        started = [mid for mid, url in live.items() if self.ensure(mid, url)]
        return started, stopped

    async def stop_all(self, ids: Iterable[str] | None = None) -> None:
        """Stop every tracker (or the given ids) and wait for their tasks."""
        targets = list(self._trackers) if ids is None else list(ids)
        trackers = [self._trackers[mid] for mid in targets if mid in self._trackers]
        for match_id in targets:
            self.stop(match_id)
        await asyncio.gather(*(t.wait_stopped() for t in trackers))

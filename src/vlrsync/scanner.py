"""Low-frequency scanner: discovery, bulk detail sync, tracker reconcile.

Each cycle runs its phases strictly in order::

    Discover -> FetchDetails -> Diff -> Upsert -> ReconcileTrackers -> Idle

The scanner never writes a detail record for an id that has an active
Tracker; while a match is live its Tracker is the only writer.

All mutable sync state (tracker registry, summary and detail snapshots)
lives in an explicit SyncState so several scanners can coexist in tests.
"""

import asyncio
import logging
from dataclasses import dataclass, field

from vlrsync.changes import BatchSnapshot
from vlrsync.config import SyncConfig
from vlrsync.exceptions import NetworkError, StoreError
from vlrsync.http_client import VLRClient
from vlrsync.models import MatchDetail, MatchSummary
from vlrsync.tracker import Tracker, TrackerRegistry

logger = logging.getLogger(__name__)


@dataclass
class SyncState:
    """Everything the scanner and its trackers share between cycles."""

    trackers: TrackerRegistry
    summaries: BatchSnapshot = field(default_factory=BatchSnapshot)
    details: BatchSnapshot = field(default_factory=BatchSnapshot)


@dataclass
class CycleReport:
    """Counters for one scanner cycle, logged per phase."""

    discovered: int = 0
    summaries_written: bool = False
    fetched: int = 0
    fetch_failures: int = 0
    changed: int = 0
    unchanged: int = 0
    skipped_tracked: int = 0
    written: int = 0
    write_failures: int = 0
    started: list[str] = field(default_factory=list)
    stopped: list[str] = field(default_factory=list)
    trackers: int = 0
    abandoned: bool = False


def select_candidates(
    listing: list[MatchSummary],
    results: list[MatchSummary],
    cap: int,
) -> list[MatchSummary]:
    """Cap each category and merge, keeping the first occurrence of an id.

    Live and upcoming cards come from the main listing, completed cards
    from the results listing. Each category keeps at most ``cap`` cards.
    """
    picked: list[MatchSummary] = []
    seen: set[str] = set()
    counts = {"live": 0, "upcoming": 0, "completed": 0}

    def take(summary: MatchSummary) -> None:
        if summary.id in seen or counts[summary.status] >= cap:
            return
        seen.add(summary.id)
        counts[summary.status] += 1
        picked.append(summary)

    for summary in listing:
        if summary.status in ("live", "upcoming"):
            take(summary)
    for summary in results:
        if summary.status == "completed":
            take(summary)
    return picked


class Scanner:
    """Periodic discovery and bulk sync of match records.

    Usage::

        scanner = Scanner(client, gateway, config)
        await scanner.run(stop_event)
    """

    def __init__(
        self,
        client: VLRClient,
        gateway,
        config: SyncConfig,
        state: SyncState | None = None,
    ) -> None:
        self._client = client
        self._gateway = gateway
        self._config = config
        self.state = state or SyncState(trackers=TrackerRegistry(self._make_tracker))
        self.cycles = 0

    def _make_tracker(self, match_id: str, url: str) -> Tracker:
        return Tracker(
            match_id,
            url,
            self._client.fetch_detail,
            self._gateway,
            interval=self._config.tracker_interval,
        )

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    async def discover(self) -> list[MatchSummary] | None:
        """Return this cycle's candidates, or None to abandon the cycle."""
        try:
            listing = await self._client.fetch_listing(self._config.listing_url)
        except NetworkError as exc:
            logger.error("[Scanner] Match listing unavailable, skipping cycle: %s", exc)
            return None

        try:
            results = await self._client.fetch_listing(self._config.results_url(1))
        except NetworkError as exc:
            logger.warning("[Scanner] Results listing unavailable: %s", exc)
            results = []

        return select_candidates(listing, results, self._config.max_results_per_category)

    async def sync_summaries(self, candidates: list[MatchSummary]) -> bool:
        """Write the summary batch when it differs from the last write."""
        snapshot = self.state.summaries
        if not snapshot.has_changed(candidates):
            logger.info("[Scanner] Summaries unchanged, skipping write")
            return False
        try:
            counts = await self._gateway.upsert_summary_batch(candidates)
        except StoreError as exc:
            logger.error("[Scanner] Summary batch write failed: %s", exc)
            return False
        snapshot.replace(candidates)
        logger.info(
            "[Scanner] Summaries synced: %d inserted, %d updated, %d unchanged",
            counts["inserted"], counts["updated"], counts["unchanged"],
        )
        return True

    async def fetch_details(
        self, candidates: list[MatchSummary]
    ) -> list[tuple[MatchSummary, MatchDetail | None]]:
        """Fetch validated details with at most ``detail_concurrency`` in flight."""
        semaphore = asyncio.Semaphore(self._config.detail_concurrency)

        async def fetch_one(summary: MatchSummary) -> tuple[MatchSummary, MatchDetail | None]:
            async with semaphore:
                try:
                    return summary, await self._client.fetch_detail(summary.id, summary.url)
                except Exception:
                    logger.exception("[Scanner] Detail fetch crashed for %s", summary.id)
                    return summary, None

        return await asyncio.gather(*(fetch_one(s) for s in candidates))

    async def upsert_details(self, changed: list[MatchDetail], report: CycleReport) -> None:
        tracked = self.state.trackers.active_ids
        for detail in changed:
            if detail.id in tracked:
                report.skipped_tracked += 1
                continue
            try:
                await self._gateway.upsert_detail(detail)
            except StoreError as exc:
                report.write_failures += 1
                logger.error("[Scanner] Detail write failed for %s: %s", detail.id, exc)
                continue
            self.state.details.accept_one(detail)
            report.written += 1

    def reconcile_trackers(
        self, fetched: list[tuple[MatchSummary, MatchDetail | None]], report: CycleReport
    ) -> None:
        live: dict[str, str] = {}
        for summary, detail in fetched:
            status = detail.status if detail is not None else summary.status
            if status == "live":
                live[summary.id] = summary.url
        report.started, report.stopped = self.state.trackers.reconcile(live)
        report.trackers = len(self.state.trackers)

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------

    async def run_cycle(self) -> CycleReport:
        """Run Discover through ReconcileTrackers once."""
        self.cycles += 1
        report = CycleReport()

        candidates = await self.discover()
        if candidates is None:
            report.abandoned = True
            return report
        report.discovered = len(candidates)
        logger.info("[Scanner] Discovered %d matches", report.discovered)
        report.summaries_written = await self.sync_summaries(candidates)

        fetched = await self.fetch_details(candidates)
        successes = sorted((d for _, d in fetched if d is not None), key=lambda d: d.id)
        report.fetched = len(successes)
        report.fetch_failures = len(fetched) - len(successes)
        logger.info(
            "[Scanner] Fetched %d details, %d failed", report.fetched, report.fetch_failures
        )

        changes = self.state.details.classify(successes)
        report.changed = len(changes.changed)
        report.unchanged = len(changes.unchanged)
        logger.info("[Scanner] Diff: %d changed, %d unchanged", report.changed, report.unchanged)

        await self.upsert_details(changes.changed, report)
        logger.info(
            "[Scanner] Wrote %d details (%d owned by trackers, %d failed)",
            report.written, report.skipped_tracked, report.write_failures,
        )

        self.reconcile_trackers(fetched, report)
        logger.info(
            "[Scanner] Trackers: %d active (+%d, -%d)",
            report.trackers, len(report.started), len(report.stopped),
        )
        return report

    async def run(self, stop: asyncio.Event) -> None:
        """Run cycles until ``stop`` is set, then stop every tracker."""
        try:
            while not stop.is_set():
                try:
                    await self.run_cycle()
                except Exception:
                    logger.exception("[Scanner] Cycle %d failed", self.cycles)
                try:
                    await asyncio.wait_for(stop.wait(), timeout=self._config.scan_interval)
                except asyncio.TimeoutError:
                    pass
        finally:
            await self.state.trackers.stop_all()
            logger.info("[Scanner] Stopped after %d cycles", self.cycles)

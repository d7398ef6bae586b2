"""Historical backfill over the paginated results listing.

Walks ``/matches/results?page=N`` from ``start_page`` and writes every
match detail that passes validation. Stops after ``max_pages`` pages,
after ``backfill_max_empty_pages`` consecutive pages without matches,
or when shutdown is requested. Requests are paced with fixed delays
between matches and between pages on top of the client's rate limiter.
"""

import asyncio
import logging
import time

from vlrsync.config import SyncConfig
from vlrsync.exceptions import StoreError
from vlrsync.http_client import VLRClient

logger = logging.getLogger(__name__)


async def _sleep(seconds: float, shutdown: asyncio.Event | None) -> None:
    """Sleep, returning early if shutdown is requested."""
    if shutdown is None:
        await asyncio.sleep(seconds)
        return
    try:
        await asyncio.wait_for(shutdown.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        pass


async def _sync_match(client: VLRClient, gateway, summary) -> str:
    """Fetch, validate and upsert one match. Returns the stats key to bump."""
    detail = await client.fetch_detail(summary.id, summary.url)
    if detail is None:
        return "skipped"
    return await gateway.upsert_detail(detail)


async def run_backfill(
    client: VLRClient,
    gateway,
    config: SyncConfig,
    start_page: int = 1,
    max_pages: int | None = None,
    shutdown: asyncio.Event | None = None,
) -> dict:
    """Page through completed results and upsert each match detail.

    Args:
        start_page: First results page (1-based).
        max_pages: Page limit; None walks until the empty-page stop.
        shutdown: Optional event checked between matches and pages.

    Returns:
        Stats dict with keys: pages, empty_pages, matches, inserted,
        updated, unchanged, skipped, failed_writes, page_errors,
        wall_time.
    """
    stats = {
        "pages": 0,
        "empty_pages": 0,
        "matches": 0,
        "inserted": 0,
        "updated": 0,
        "unchanged": 0,
        "skipped": 0,
        "failed_writes": 0,
        "page_errors": 0,
    }
    start_time = time.monotonic()

    if max_pages:
        logger.info("[Backfill] Starting at page %d, at most %d pages", start_page, max_pages)
    else:
        logger.info("[Backfill] Starting at page %d, all available pages", start_page)

    end_page = start_page + max_pages if max_pages else None
    page = start_page
    consecutive_empty = 0
    attempts = 0

    def stopping() -> bool:
        return shutdown is not None and shutdown.is_set()

    while not stopping():
        if end_page is not None and page >= end_page:
            logger.info("[Backfill] Reached page limit")
            break

        try:
            summaries = await client.fetch_listing(config.results_url(page))
        except Exception as exc:
            attempts += 1
            stats["page_errors"] += 1
            if attempts >= config.backfill_page_attempts:
                logger.error(
                    "[Backfill] Page %d failed %d times, skipping: %s", page, attempts, exc
                )
                page += 1
                attempts = 0
                continue
            logger.error(
                "[Backfill] Page %d failed (%s), retrying in %.0fs",
                page, exc, config.backfill_retry_delay,
            )
            await _sleep(config.backfill_retry_delay, shutdown)
            continue

        attempts = 0
        stats["pages"] += 1

        if not summaries:
            consecutive_empty += 1
            stats["empty_pages"] += 1
            logger.warning(
                "[Backfill] Page %d has no matches (%d/%d consecutive)",
                page, consecutive_empty, config.backfill_max_empty_pages,
            )
            if consecutive_empty >= config.backfill_max_empty_pages:
                logger.info("[Backfill] Found %d consecutive empty pages, done", consecutive_empty)
                break
        else:
            consecutive_empty = 0
            logger.info("[Backfill] Page %d: %d matches", page, len(summaries))

            for index, summary in enumerate(summaries, start=1):
                if stopping():
                    break
                stats["matches"] += 1
                progress = f"[{index}/{len(summaries)}] {summary.id}"
                try:
                    outcome = await _sync_match(client, gateway, summary)
                except StoreError as exc:
                    stats["failed_writes"] += 1
                    logger.error("  %s write failed: %s", progress, exc)
                except Exception:
                    stats["skipped"] += 1
                    logger.exception("  %s failed, skipping", progress)
                else:
                    stats[outcome] += 1
                    logger.info("  %s %s", progress, outcome)
                await _sleep(config.backfill_match_delay, shutdown)

        page += 1
        await _sleep(config.backfill_page_delay, shutdown)

    stats["wall_time"] = time.monotonic() - start_time
    logger.info(
        "[Backfill] Finished: %d pages, %d matches (%d inserted, %d updated, %d unchanged, %d skipped)",
        stats["pages"], stats["matches"], stats["inserted"],
        stats["updated"], stats["unchanged"], stats["skipped"],
    )
    return stats

"""vlr.gg HTTP client built on httpx.

Sends every request with one fixed browser-like header profile, paces
requests through a shared RateLimiter, and retries throttled (429) and
server-error (5xx) responses with tenacity. Refused connections and
timeouts are not retried here: they surface as NetworkError and the
item is simply picked up again on the next cycle.

When the source refuses connections, an alert is scheduled on the
optional notifier. The alert is fire-and-forget and never changes the
error raised to the caller.

Usage:
    async with VLRClient(config) as client:
        html = await client.fetch("https://www.vlr.gg/matches")
        detail = await client.fetch_detail("542195")
"""

import asyncio
import logging
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from vlrsync.config import DEFAULT_HEADERS, SyncConfig
from vlrsync.exceptions import NetworkError, PageNotFound, ParseError, RateLimited
from vlrsync.listing_parser import parse_listing
from vlrsync.match_parser import parse_detail
from vlrsync.models import MatchDetail, MatchSummary
from vlrsync.notifications import WebhookNotifier
from vlrsync.rate_limiter import RateLimiter
from vlrsync.validation import accept_detail

logger = logging.getLogger(__name__)


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, NetworkError) and exc.is_transient


class VLRClient:
    """Async HTTP client for vlr.gg listing and match pages.

    One ``httpx.AsyncClient`` is shared by the scanner and every tracker.
    ``fetch()`` returns raw HTML; ``fetch_listing()`` and ``fetch_detail()``
    add extraction and never raise for per-item failures.
    """

    def __init__(
        self,
        config: SyncConfig | None = None,
        notifier: WebhookNotifier | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        retry_wait: tuple[float, float] = (1.0, 15.0),
    ):
        if config is None:
            config = SyncConfig()

        self._config = config
        self._notifier = notifier
        self._transport = transport
        self._retry_wait = retry_wait
        self.rate_limiter = RateLimiter(config)
        self._client: httpx.AsyncClient | None = None
        self._alert_tasks: set[asyncio.Task] = set()

        # Request counters
        self._request_count = 0
        self._success_count = 0
        self._failure_count = 0

    async def start(self) -> None:
        """Open the underlying connection pool."""
        self._client = httpx.AsyncClient(
            headers=DEFAULT_HEADERS,
            timeout=httpx.Timeout(self._config.request_timeout),
            follow_redirects=True,
            transport=self._transport,
        )

    async def close(self) -> None:
        """Close the connection pool and wait for pending alerts."""
        if self._alert_tasks:
            await asyncio.gather(*self._alert_tasks, return_exceptions=True)
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "VLRClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Raw fetching
    # ------------------------------------------------------------------

    async def _get(self, url: str) -> str:
        """One paced GET attempt. Maps every failure to a NetworkError."""
        if self._client is None:
            raise NetworkError("Client not started. Call start() first.", url=url)

        await self.rate_limiter.wait()
        self._request_count += 1

        try:
            response = await self._client.get(url)
        except (httpx.ConnectError, httpx.TimeoutException) as exc:
            self._failure_count += 1
            self._alert_unreachable(url, exc)
            raise NetworkError(f"Failed to fetch {url}: {exc!r}", url=url) from exc
        except httpx.HTTPError as exc:
            self._failure_count += 1
            raise NetworkError(f"Failed to fetch {url}: {exc!r}", url=url) from exc

        status = response.status_code
        if status == 429:
            self._failure_count += 1
            self.rate_limiter.backoff()
            raise RateLimited(f"Rate limited on {url}", url=url, status_code=status)
        if status == 404:
            self._failure_count += 1
            raise PageNotFound(f"Page not found: {url}", url=url, status_code=status)
        if status >= 400:
            self._failure_count += 1
            if status >= 500:
                self.rate_limiter.backoff()
            raise NetworkError(
                f"Unexpected status {status} from {url}", url=url, status_code=status
            )

        self.rate_limiter.recover()
        self._success_count += 1
        logger.debug("Fetched %s (%d chars)", url, len(response.text))
        return response.text

    async def fetch(self, url: str) -> str:
        """Fetch a page, retrying 429/5xx with exponential jitter.

        Raises:
            NetworkError: Connection refused, timeout, or a bad status
                after ``max_retries`` attempts.
        """
        initial, maximum = self._retry_wait
        async for attempt in AsyncRetrying(
            retry=retry_if_exception(_is_transient),
            wait=wait_exponential_jitter(initial=initial, max=maximum, jitter=initial),
            stop=stop_after_attempt(self._config.max_retries),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                return await self._get(url)
        raise NetworkError(f"No fetch attempt made for {url}", url=url)

    def _alert_unreachable(self, url: str, exc: Exception) -> None:
        """Schedule a rate-limited alert without awaiting it."""
        if self._notifier is None:
            return
        task = asyncio.get_running_loop().create_task(
            self._notifier.notify(
                "vlr.gg unreachable",
                f"Request to {url} failed: {exc!r}",
            )
        )
        self._alert_tasks.add(task)
        task.add_done_callback(self._alert_tasks.discard)

    # ------------------------------------------------------------------
    # Fetch + extract
    # ------------------------------------------------------------------

    async def fetch_listing(self, url: str) -> list[MatchSummary]:
        """Fetch and parse a listing page.

        Raises:
            NetworkError: If the page cannot be fetched. Parsing never
                raises; a page without cards yields an empty list.
        """
        html = await self.fetch(url)
        return parse_listing(html, base_url=self._config.base_url)

    async def fetch_detail(self, match_id: str, url: str | None = None) -> MatchDetail | None:
        """Fetch, parse and validate one match page.

        Returns None (after logging) on fetch failure, parse failure, or
        when the record fails the persistence gate.
        """
        url = url or self._config.detail_url(match_id)
        try:
            html = await self.fetch(url)
            detail = parse_detail(html, match_id, url=url, base_url=self._config.base_url)
        except NetworkError as exc:
            logger.warning("Fetch failed for match %s (%s): %s", match_id, url, exc)
            return None
        except ParseError as exc:
            logger.warning("Parse failed for match %s (%s): %s", match_id, url, exc)
            return None
        return accept_detail(detail)

    @property
    def stats(self) -> dict:
        """Return current client statistics."""
        total = self._request_count
        return {
            "requests": total,
            "successes": self._success_count,
            "failures": self._failure_count,
            "success_rate": (self._success_count / total) if total > 0 else 0.0,
            "current_delay": self.rate_limiter.current_delay,
        }

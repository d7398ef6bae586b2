"""Sync worker configuration with sensible defaults for vlr.gg polling."""

from dataclasses import dataclass

from vlrsync.exceptions import ConfigError

VLR_BASE_URL = "https://www.vlr.gg"

# Fixed header profile sent with every request.
DEFAULT_HEADERS: dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    ),
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,image/apng,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.9",
}


@dataclass
class SyncConfig:
    """Configuration for the vlr.gg sync worker.

    All timing values are in seconds. Store endpoint and credential are
    the only mandatory settings; call ``validate()`` once at startup.
    """

    # Source site (single-site scraper)
    base_url: str = VLR_BASE_URL
    listing_path: str = "/matches"
    results_path: str = "/matches/results"

    # Scanner / tracker periods
    scan_interval: float = 120.0
    tracker_interval: float = 30.0

    # Listing caps, applied per category (live, upcoming, completed)
    max_results_per_category: int = 50

    # Max detail pages in flight during one scanner cycle
    detail_concurrency: int = 4

    # Per-request timeout; a timeout is handled like a refused connection
    request_timeout: float = 15.0

    # Rate limiting: delay between requests
    min_delay: float = 0.25
    backoff_factor: float = 2.0
    recovery_factor: float = 0.85
    max_backoff: float = 30.0

    # tenacity stop_after_attempt (429 / 5xx only)
    max_retries: int = 3

    # Backfill pacing
    backfill_page_delay: float = 0.1
    backfill_match_delay: float = 0.05
    backfill_retry_delay: float = 10.0
    backfill_max_empty_pages: int = 3
    backfill_page_attempts: int = 5

    # Alerting (disabled when webhook_url is None)
    webhook_url: str | None = None
    alert_cooldown: float = 30 * 60.0

    # Backing store: "sqlite:///path/to.db", a bare path, or an http(s) URL
    store_url: str | None = None
    store_api_key: str | None = None

    # Logs live under data_dir/logs
    data_dir: str = "data"

    @property
    def listing_url(self) -> str:
        return self.base_url + self.listing_path

    def results_url(self, page: int = 1) -> str:
        """URL of a completed-results listing page (1-based)."""
        if page <= 1:
            return self.base_url + self.results_path
        return f"{self.base_url}{self.results_path}?page={page}"

    def detail_url(self, match_id: str) -> str:
        return f"{self.base_url}/{match_id}"

    @property
    def is_remote_store(self) -> bool:
        return bool(self.store_url) and self.store_url.startswith(("http://", "https://"))

    def validate(self) -> None:
        """Fail fast on missing mandatory settings.

        Raises:
            ConfigError: If the store endpoint is missing, or if a remote
                store is configured without an API key.
        """
        if not self.store_url:
            raise ConfigError("Store endpoint is not set (VLRSYNC_STORE_URL)")
        if self.is_remote_store and not self.store_api_key:
            raise ConfigError(
                f"Store {self.store_url} requires an API key (VLRSYNC_STORE_API_KEY)"
            )
        if self.scan_interval <= 0 or self.tracker_interval <= 0:
            raise ConfigError("scan_interval and tracker_interval must be positive")

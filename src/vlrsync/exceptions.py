"""Custom exception hierarchy for the vlr.gg sync worker.

Exception tree:
    SyncError
    +-- NetworkError          (fetch failed: refused, timeout, bad status)
    |   +-- RateLimited       (HTTP 429)
    |   +-- PageNotFound      (HTTP 404)
    +-- ParseError            (required markup missing or malformed)
    +-- DetailValidationError (parsed record fails a post-parse invariant)
    +-- StoreError            (backing store rejected a write)
    +-- ConfigError           (missing mandatory setting; fatal at startup)
"""

from typing import Optional


class SyncError(Exception):
    """Base exception for all sync worker errors."""

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class NetworkError(SyncError):
    """The page could not be fetched.

    Covers refused connections, timeouts and unexpected status codes.
    Never fatal -- the item is simply retried on the next cycle.
    """

    @property
    def is_transient(self) -> bool:
        """Server-side failures worth retrying within the same request."""
        return self.status_code is not None and self.status_code >= 500


class RateLimited(NetworkError):
    """Server returned HTTP 429 Too Many Requests.

    This is a retriable error -- the client backs off and retries.
    """

    @property
    def is_transient(self) -> bool:
        return True


class PageNotFound(NetworkError):
    """HTTP 404 -- the requested page does not exist on vlr.gg."""

    pass


class ParseError(SyncError):
    """Required structure is missing from the page markup.

    Isolated to one item: that item degrades to no-data for this cycle.
    """

    pass


class DetailValidationError(SyncError):
    """A parsed detail record violates a persistence invariant."""

    def __init__(self, match_id: str, reason: str):
        self.match_id = match_id
        self.reason = reason
        super().__init__(f"Match {match_id}: {reason}")


class StoreError(SyncError):
    """The backing store rejected or failed a write."""

    pass


class ConfigError(SyncError):
    """A mandatory configuration value is missing or invalid."""

    pass

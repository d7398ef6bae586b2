"""Sync gateway: the upsert surface of the backing store.

Two implementations share one async interface:

- SqliteGateway: local document store (Database + MatchRepository)
- HttpSyncGateway: remote document store reached through an HTTP
  mutation endpoint, authenticated with an API key carried in the
  mutation arguments

Every failure is raised as StoreError so callers can keep the snapshot
unadvanced and retry on the next pass.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Any, Protocol

import httpx

from vlrsync.config import SyncConfig
from vlrsync.db import Database
from vlrsync.exceptions import StoreError
from vlrsync.models import MatchDetail, MatchSummary
from vlrsync.repository import MatchRepository, UpsertResult

logger = logging.getLogger(__name__)

UPSERT_SUMMARY_PATH = "matches:upsertMatch"
UPSERT_SUMMARY_BATCH_PATH = "matches:upsertHighLevelMatchBatch"
UPSERT_DETAIL_PATH = "matches:upsertMatchDetails"

_RESULTS = ("inserted", "updated", "unchanged")


class SyncGateway(Protocol):
    async def upsert_summary(self, record: MatchSummary) -> UpsertResult: ...

    async def upsert_summary_batch(self, records: list[MatchSummary]) -> dict[str, int]: ...

    async def upsert_detail(self, record: MatchDetail) -> UpsertResult: ...

    async def close(self) -> None: ...


def _summary_document(record: MatchSummary) -> dict[str, Any]:
    # Strip detail-only fields when a MatchDetail is written as a summary
    return MatchSummary.model_validate(record.model_dump()).to_document()


class SqliteGateway:
    """Gateway over the local SQLite document tables."""

    def __init__(self, db: Database) -> None:
        self._db = db
        self._repo = MatchRepository(db.conn)

    @classmethod
    def open(cls, path: str | Path) -> "SqliteGateway":
        db = Database(path)
        db.initialize()
        return cls(db)

    @property
    def repository(self) -> MatchRepository:
        return self._repo

    async def upsert_summary(self, record: MatchSummary) -> UpsertResult:
        try:
            return self._repo.upsert_summary(_summary_document(record))
        except sqlite3.Error as exc:
            raise StoreError(f"Summary upsert failed for {record.id}: {exc}") from exc

    async def upsert_summary_batch(self, records: list[MatchSummary]) -> dict[str, int]:
        try:
            return self._repo.upsert_summaries([_summary_document(r) for r in records])
        except sqlite3.Error as exc:
            raise StoreError(f"Summary batch upsert failed: {exc}") from exc

    async def upsert_detail(self, record: MatchDetail) -> UpsertResult:
        try:
            return self._repo.upsert_detail(record.to_document())
        except sqlite3.Error as exc:
            raise StoreError(f"Detail upsert failed for {record.id}: {exc}") from exc

    async def close(self) -> None:
        self._db.close()


class HttpSyncGateway:
    """Gateway posting mutations to ``{store_url}/api/mutation``.

    Request body::

        {"path": "matches:upsertMatch",
         "args": {"match": {...}, "apiKey": "..."},
         "format": "json"}

    The endpoint answers ``{"status": "success", "value": ...}`` or
    ``{"status": "error", "errorMessage": ...}``.
    """

    def __init__(
        self,
        store_url: str,
        api_key: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint = store_url.rstrip("/") + "/api/mutation"
        self._api_key = api_key
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def _mutation(self, path: str, args: dict[str, Any]) -> Any:
        payload = {"path": path, "args": {**args, "apiKey": self._api_key}, "format": "json"}
        try:
            response = await self._client.post(self._endpoint, json=payload)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise StoreError(f"Mutation {path} failed: {exc}", url=self._endpoint) from exc

        if body.get("status") != "success":
            raise StoreError(
                f"Mutation {path} rejected: {body.get('errorMessage', body)}",
                url=self._endpoint,
            )
        return body.get("value")

    async def upsert_summary(self, record: MatchSummary) -> UpsertResult:
        value = await self._mutation(UPSERT_SUMMARY_PATH, {"match": _summary_document(record)})
        return _result_status(value)

    async def upsert_summary_batch(self, records: list[MatchSummary]) -> dict[str, int]:
        value = await self._mutation(
            UPSERT_SUMMARY_BATCH_PATH,
            {"scrapedMatches": [_summary_document(r) for r in records]},
        )
        counts = {key: 0 for key in _RESULTS}
        if isinstance(value, dict):
            for key in _RESULTS:
                counts[key] = int(value.get(key, 0) or 0)
        elif isinstance(value, list):
            for item in value:
                counts[_result_status(item)] += 1
        return counts

    async def upsert_detail(self, record: MatchDetail) -> UpsertResult:
        value = await self._mutation(UPSERT_DETAIL_PATH, {"details": record.to_document()})
        return _result_status(value)

    async def close(self) -> None:
        await self._client.aclose()


def _result_status(value: Any) -> UpsertResult:
    status = value.get("status") if isinstance(value, dict) else value
    if status in _RESULTS:
        return status
    # Endpoints that only acknowledge are treated as a write
    return "updated"


def sqlite_path(store_url: str) -> Path:
    """``sqlite:///data/vlr.db`` or a bare path -> filesystem path."""
    if store_url.startswith("sqlite:///"):
        return Path(store_url[len("sqlite:///"):])
    return Path(store_url)


def open_gateway(config: SyncConfig) -> SyncGateway:
    """Build the gateway selected by ``config.store_url``.

    Raises:
        ConfigError: From ``config.validate()`` on missing settings.
    """
    config.validate()
    if config.is_remote_store:
        logger.info("Using remote store %s", config.store_url)
        return HttpSyncGateway(
            config.store_url, config.store_api_key, timeout=config.request_timeout
        )

    path = sqlite_path(config.store_url)
    logger.info("Using SQLite store %s", path)
    return SqliteGateway.open(path)

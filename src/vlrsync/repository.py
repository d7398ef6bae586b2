"""Data access layer for match summary and match detail documents.

Each upsert is a read-modify-write keyed by the match id: the stored
document is compared with the incoming one (via ``changes.canonical``)
and the row is only touched when they differ. Writes use
INSERT ... ON CONFLICT DO UPDATE SET so rows are modified in place and
keep their ``created_at``.

Batch methods wrap multiple upserts in a single atomic transaction.
"""

import json
import sqlite3
from datetime import datetime, timezone
from typing import Any, Literal

from vlrsync.changes import canonical

UpsertResult = Literal["inserted", "updated", "unchanged"]

TABLES = ("match_summaries", "match_details")

# ---------------------------------------------------------------------------
# SQL constants
# ---------------------------------------------------------------------------

UPSERT_DOCUMENT = """
    INSERT INTO {table} (
        id, status, scheduled_time, data, created_at, updated_at
    ) VALUES (
        :id, :status, :scheduled_time, :data, :now, :now
    )
    ON CONFLICT(id) DO UPDATE SET
        status         = excluded.status,
        scheduled_time = excluded.scheduled_time,
        data           = excluded.data,
        updated_at     = excluded.updated_at
"""

SELECT_DOCUMENT = "SELECT data FROM {table} WHERE id = ?"


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class MatchRepository:
    """Document store for match records.

    Receives a raw ``sqlite3.Connection`` (not a Database instance) so
    tests can pass any connection, including in-memory databases.
    Exceptions (IntegrityError, OperationalError) are NOT caught; they
    propagate to callers.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    # ------------------------------------------------------------------
    # Upserts
    # ------------------------------------------------------------------

    def _upsert(self, table: str, document: dict[str, Any]) -> UpsertResult:
        existing = self._get(table, document["id"])
        if existing is not None and canonical(existing) == canonical(document):
            return "unchanged"

        self.conn.execute(
            UPSERT_DOCUMENT.format(table=table),
            {
                "id": document["id"],
                "status": document.get("status", "upcoming"),
                "scheduled_time": document.get("scheduledTime"),
                "data": json.dumps(document, ensure_ascii=False),
                "now": _now(),
            },
        )
        return "inserted" if existing is None else "updated"

    def upsert_summary(self, document: dict[str, Any]) -> UpsertResult:
        """Insert or update one summary document."""
        with self.conn:
            return self._upsert("match_summaries", document)

    def upsert_summaries(self, documents: list[dict[str, Any]]) -> dict[str, int]:
        """Atomically upsert a batch of summaries and count the outcomes."""
        counts = {"inserted": 0, "updated": 0, "unchanged": 0}
        with self.conn:
            for document in documents:
                counts[self._upsert("match_summaries", document)] += 1
        return counts

    def upsert_detail(self, document: dict[str, Any]) -> UpsertResult:
        """Insert or update one detail document."""
        with self.conn:
            return self._upsert("match_details", document)

    # ------------------------------------------------------------------
    # Read methods
    # ------------------------------------------------------------------

    def _get(self, table: str, match_id: str) -> dict[str, Any] | None:
        row = self.conn.execute(
            SELECT_DOCUMENT.format(table=table), (match_id,)
        ).fetchone()
        return json.loads(row[0]) if row is not None else None

    def get_summary(self, match_id: str) -> dict[str, Any] | None:
        """Return a stored summary document, or None if not found."""
        return self._get("match_summaries", match_id)

    def get_detail(self, match_id: str) -> dict[str, Any] | None:
        """Return a stored detail document, or None if not found."""
        return self._get("match_details", match_id)

    def get_row(self, table: str, match_id: str) -> dict | None:
        """Return the raw row (with timestamps) as a dict."""
        if table not in TABLES:
            raise ValueError(f"Unknown table: {table}")
        row = self.conn.execute(
            f"SELECT * FROM {table} WHERE id = ?", (match_id,)
        ).fetchone()
        return dict(row) if row is not None else None

    def count(self, table: str) -> int:
        """Return the number of rows in a document table."""
        if table not in TABLES:
            raise ValueError(f"Unknown table: {table}")
        return self.conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]

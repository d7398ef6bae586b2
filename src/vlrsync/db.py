"""SQLite connection for the local document store.

One connection per process, opened in WAL mode so a reader (for example
an ad-hoc ``sqlite3`` shell) never blocks the worker's writes. The schema
lives in ``NNN_description.sql`` files shipped inside the package and is
versioned through ``PRAGMA user_version``.
"""

import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def list_migrations(migrations_dir: str | Path | None = None) -> list[tuple[int, Path]]:
    """Return ``(version, path)`` pairs sorted by version.

    001_initial.sql -> 1
    """
    directory = Path(migrations_dir) if migrations_dir else MIGRATIONS_DIR
    found = [
        (int(path.name.split("_", 1)[0]), path)
        for path in directory.glob("*.sql")
    ]
    return sorted(found)


class Database:
    """Owns the sqlite3 connection used by MatchRepository.

    Usage::

        with Database("data/vlr.db") as db:
            db.apply_migrations()
            repo = MatchRepository(db.conn)
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn: sqlite3.Connection | None = None

    def connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode = WAL")
        conn.execute("PRAGMA synchronous = NORMAL")
        # Scanner and trackers share this connection; wait out external writers
        conn.execute("PRAGMA busy_timeout = 30000")
        self._conn = conn
        return conn

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "Database":
        self.connect()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def get_schema_version(self) -> int:
        return self.conn.execute("PRAGMA user_version").fetchone()[0]

    def apply_migrations(self, migrations_dir: str | Path | None = None) -> int:
        """Run every migration newer than the stored schema version.

        Returns:
            Number of migrations applied.
        """
        current = self.get_schema_version()
        pending = [(v, p) for v, p in list_migrations(migrations_dir) if v > current]

        for version, path in pending:
            logger.info("Applying migration %s", path.name)
            self.conn.executescript(path.read_text(encoding="utf-8"))
            self.conn.execute(f"PRAGMA user_version = {version}")

        return len(pending)

    def initialize(self) -> sqlite3.Connection:
        """Connect and bring the schema up to date."""
        self.connect()
        self.apply_migrations()
        return self.conn

"""SQLite persistence for the to-do list.

One connection per ``TodoDatabase``; the schema is created on first use and
its version recorded so later layouts can migrate forward.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

# ---------------------------------------------------------------------------
# Schema DDL
# ---------------------------------------------------------------------------

# seq orders the list newest first; action_id is the caller-facing key.
_SCHEMA_V1 = """
CREATE TABLE IF NOT EXISTS todos (
    seq        INTEGER PRIMARY KEY AUTOINCREMENT,
    action_id  TEXT NOT NULL UNIQUE,
    title      TEXT NOT NULL,
    note       TEXT NOT NULL DEFAULT '',
    chips_json TEXT,
    done       INTEGER NOT NULL DEFAULT 0,
    ts         INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""


class DatabaseError(Exception):
    """The database was used before ``initialize()`` or after ``close()``."""


class TodoDatabase:
    """Owns the SQLite connection behind ``TodoStore``.

    ``":memory:"`` gives a throwaway database for tests; any other path is
    expanded and its parent directory created.

    Usage::

        with TodoDatabase("~/.lifelens/todos.db") as db:
            with db.transaction() as conn:
                conn.execute(...)
    """

    def __init__(self, db_path: str = ":memory:") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """The open connection.

        Raises:
            DatabaseError: not initialized, or already closed.
        """
        if self._conn is None:
            raise DatabaseError("Database not initialized. Call initialize() first.")
        return self._conn

    def _connect(self) -> sqlite3.Connection:
        if self._db_path == ":memory:":
            target = ":memory:"
        else:
            db_file = Path(self._db_path).expanduser()
            db_file.parent.mkdir(parents=True, exist_ok=True)
            target = str(db_file)
        # The MCP server may call tools from worker threads.
        conn = sqlite3.connect(target, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def initialize(self) -> None:
        """Open the connection and create or migrate the schema. Idempotent."""
        if self._conn is not None:
            return
        self._conn = self._connect()
        self._migrate()
        logger.info("To-do database ready: %s", self._db_path)

    def _migrate(self) -> None:
        current = self._applied_version()
        if current >= SCHEMA_VERSION:
            return
        with self.transaction() as conn:
            conn.executescript(_SCHEMA_V1)
            conn.execute("INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
        logger.info("To-do schema migrated from version %d to %d", current, SCHEMA_VERSION)

    def _applied_version(self) -> int:
        exists = self.connection.execute(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'schema_version'"
        ).fetchone()
        return self.get_schema_version() if exists else 0

    def get_schema_version(self) -> int:
        """Highest applied schema version (0 when none recorded)."""
        row = self.connection.execute("SELECT MAX(version) FROM schema_version").fetchone()
        return row[0] or 0

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Commit on success, roll back and re-raise on error."""
        conn = self.connection
        try:
            yield conn
        except Exception:
            conn.rollback()
            raise
        conn.commit()

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        logger.info("To-do database closed")

    def __enter__(self) -> TodoDatabase:
        self.initialize()
        return self

    def __exit__(self, *args) -> None:
        self.close()

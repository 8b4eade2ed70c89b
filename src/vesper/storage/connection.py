"""Thread-local SQLite connections for the Vesper store.

Every thread talking to the database gets its own ``sqlite3`` connection
with foreign keys enforced and ``sqlite3.Row`` rows. Writes are grouped with
``transaction()``; reads go through ``fetch_one``/``fetch_all``.
"""

from __future__ import annotations

import os
import platform
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from vesper.config import get_logger
from vesper.exceptions import DatabaseError

logger = get_logger(__name__)

Params = tuple[Any, ...] | dict[str, Any]

# Applied in order to every new connection
PRAGMAS: tuple[str, ...] = (
    "foreign_keys = ON",
    "synchronous = NORMAL",
    "temp_store = MEMORY",
)


def _journal_mode() -> str:
    # WAL side files stay locked on Windows and between pytest tmp dirs
    if "PYTEST_CURRENT_TEST" in os.environ or platform.system() == "Windows":
        return "DELETE"
    return "WAL"


class DatabaseConnection:
    """Per-thread SQLite connections to one database file."""

    def __init__(self, db_path: str | Path, timeout: float = 30.0) -> None:
        """Initialize the connection manager.

        Args:
            db_path: SQLite database file; parent directories are created on
                first connect.
            timeout: Seconds to wait on a locked database.

        Raises:
            DatabaseError: If ``db_path`` is empty or contains a NUL byte.
        """
        raw = str(db_path)
        if not raw or "\x00" in raw:
            raise DatabaseError(
                message="Invalid database path",
                hint="Set VESPER_DATABASE_PATH to a writable file path",
                details={"database_path": repr(raw)},
            )
        self.db_path = Path(raw)
        self.timeout = timeout
        self._local = threading.local()
        self._opened: list[sqlite3.Connection] = []
        self._lock = threading.Lock()

    def _failure(self, action: str, error: sqlite3.Error) -> DatabaseError:
        return DatabaseError(
            message=f"{action}: {error}",
            details={"database_path": str(self.db_path)},
        )

    def connect(self) -> sqlite3.Connection:
        """The calling thread's connection, opened on first use."""
        conn: sqlite3.Connection | None = getattr(self._local, "conn", None)
        if conn is not None:
            return conn

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            conn = sqlite3.connect(
                str(self.db_path),
                timeout=self.timeout,
                check_same_thread=False,
                isolation_level=None,
            )
            for pragma in (*PRAGMAS, f"journal_mode = {_journal_mode()}"):
                conn.execute(f"PRAGMA {pragma}")
        except sqlite3.Error as e:
            raise self._failure("Cannot open database", e) from e

        conn.row_factory = sqlite3.Row
        self._local.conn = conn
        with self._lock:
            self._opened.append(conn)
        logger.debug("Opened database connection", path=str(self.db_path))
        return conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run the enclosed statements in one transaction.

        Commits on success. Any exception rolls back; SQLite errors are
        re-raised as ``DatabaseError``.
        """
        conn = self.connect()
        conn.execute("BEGIN")
        try:
            yield conn
        except sqlite3.Error as e:
            conn.rollback()
            logger.error("Rolled back transaction", error=str(e))
            raise self._failure("Database write failed", e) from e
        except BaseException:
            conn.rollback()
            raise
        else:
            conn.commit()

    def executescript(self, script: str) -> None:
        """Run a multi-statement SQL script (DDL) outside a transaction."""
        try:
            self.connect().executescript(script)
        except sqlite3.Error as e:
            raise self._failure("Database script failed", e) from e

    def execute(self, sql: str, parameters: Params = ()) -> sqlite3.Cursor:
        """Run one statement in autocommit mode."""
        try:
            return self.connect().execute(sql, parameters)
        except sqlite3.Error as e:
            raise self._failure("Database query failed", e) from e

    def fetch_one(self, sql: str, parameters: Params = ()) -> sqlite3.Row | None:
        row: sqlite3.Row | None = self.execute(sql, parameters).fetchone()
        return row

    def fetch_all(self, sql: str, parameters: Params = ()) -> list[sqlite3.Row]:
        return self.execute(sql, parameters).fetchall()

    def close(self) -> None:
        """Close the connections of every thread."""
        with self._lock:
            while self._opened:
                self._opened.pop().close()
        self._local = threading.local()

"""SQLite connection layer for the asset, chunk and message stores."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import sqlite_vec

# Seconds a writer waits on a locked database before sqlite3 raises.
DEFAULT_BUSY_TIMEOUT = 5.0


class Database:
    """One reclaim database file with the sqlite-vec extension available.

    The relational stores (assets, chunks, chat messages) and the local vector
    index share the file, so a single connection serves every adapter.

    Args:
        db_path: Database file; created on first connect.
        timeout: Busy timeout in seconds for concurrent writers.
    """

    def __init__(self, db_path: Path | str, timeout: float = DEFAULT_BUSY_TIMEOUT) -> None:
        self.db_path = Path(db_path)
        self.timeout = timeout
        self._conn: sqlite3.Connection | None = None

    def connect(self) -> sqlite3.Connection:
        """Return a new connection with sqlite-vec loaded and FKs enforced."""
        conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        conn.enable_load_extension(True)
        try:
            sqlite_vec.load(conn)
        finally:
            conn.enable_load_extension(False)
        conn.execute("PRAGMA foreign_keys = ON")
        conn.execute("PRAGMA journal_mode = WAL")
        return conn

    def __enter__(self) -> sqlite3.Connection:
        self._conn = self.connect()
        return self._conn

    def __exit__(self, *args: object) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None


def open_database(db_path: Path | str) -> sqlite3.Connection:
    """Connect to *db_path* and bring its schema up to date."""
    from reclaim.db.schema import initialize

    conn = Database(db_path).connect()
    initialize(conn)
    return conn

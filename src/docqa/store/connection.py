"""SQLite connection layer for the durable blob store."""

from __future__ import annotations

import sqlite3
from pathlib import Path

# Seconds a writer waits on a locked database before sqlite3 raises.
_BUSY_TIMEOUT = 5.0


class Database:
    """The SQLite file that holds the blob key space.

    Args:
        db_path: Database file; missing parent directories are created on connect.
        timeout: Lock wait in seconds, passed to ``sqlite3.connect``.
    """

    def __init__(self, db_path: Path | str, timeout: float = _BUSY_TIMEOUT) -> None:
        self.db_path = Path(db_path)
        self.timeout = timeout
        self._conn: sqlite3.Connection | None = None

    def connect(self) -> sqlite3.Connection:
        """Open and return a new connection with Row access and WAL journaling.

        ``check_same_thread=False`` lets one store object serve several
        threads; callers serialize their own statements.
        """
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode = WAL")
        return conn

    def __enter__(self) -> sqlite3.Connection:
        self._conn = self.connect()
        return self._conn

    def __exit__(self, *args: object) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

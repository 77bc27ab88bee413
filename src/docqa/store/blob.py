"""Durable key-value blob storage.

The document and chat stores only talk to the ``BlobStore`` protocol:
``put`` / ``get`` / ``list`` / ``delete`` over a flat key space. Two
implementations ship here:

- ``SqliteBlobStore``: one SQLite file, survives restarts.
- ``InMemoryBlobStore``: a dict, for tests and throwaway sessions.

When no blob store is configured the callers run cache-only; that is a
valid mode, not an error.
"""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Protocol, runtime_checkable

from docqa.store.connection import Database
from docqa.store.migrations import run_migrations


class BlobExistsError(FileExistsError):
    """Raised by ``put`` when the key exists and ``overwrite`` is False."""


@runtime_checkable
class BlobStore(Protocol):
    def put(
        self,
        key: str,
        data: bytes,
        *,
        private: bool = True,
        content_type: str = "application/json",
        overwrite: bool = False,
    ) -> None: ...

    def get(self, key: str) -> bytes | None: ...

    def list(self, prefix: str = "") -> list[str]: ...

    def delete(self, key: str) -> None: ...


class SqliteBlobStore:
    """Blob store persisted in a single SQLite database file.

    The connection is opened on construction and owned by this object;
    call ``close()`` (or use it as a context manager) when done.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._conn = Database(self.path).connect()
        run_migrations(self._conn)
        self._lock = threading.Lock()

    def put(
        self,
        key: str,
        data: bytes,
        *,
        private: bool = True,
        content_type: str = "application/json",
        overwrite: bool = False,
    ) -> None:
        if overwrite:
            sql = """
                INSERT INTO blobs (key, data, content_type, private)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    data = excluded.data,
                    content_type = excluded.content_type,
                    private = excluded.private,
                    updated_at = datetime('now')
            """
        else:
            sql = "INSERT INTO blobs (key, data, content_type, private) VALUES (?, ?, ?, ?)"
        with self._lock:
            try:
                self._conn.execute(sql, (key, sqlite3.Binary(data), content_type, int(private)))
            except sqlite3.IntegrityError as exc:
                self._conn.rollback()
                raise BlobExistsError(f"Blob already exists: {key!r}") from exc
            self._conn.commit()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            row = self._conn.execute("SELECT data FROM blobs WHERE key = ?", (key,)).fetchone()
        return bytes(row["data"]) if row else None

    def list(self, prefix: str = "") -> list[str]:
        """Return all keys starting with *prefix*, sorted."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT key FROM blobs WHERE substr(key, 1, ?) = ? ORDER BY key",
                (len(prefix), prefix),
            ).fetchall()
        return [r["key"] for r in rows]

    def delete(self, key: str) -> None:
        with self._lock:
            self._conn.execute("DELETE FROM blobs WHERE key = ?", (key,))
            self._conn.commit()

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> SqliteBlobStore:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class InMemoryBlobStore:
    """Dict-backed blob store; contents vanish with the process."""

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}

    def put(
        self,
        key: str,
        data: bytes,
        *,
        private: bool = True,
        content_type: str = "application/json",
        overwrite: bool = False,
    ) -> None:
        if not overwrite and key in self._blobs:
            raise BlobExistsError(f"Blob already exists: {key!r}")
        self._blobs[key] = bytes(data)

    def get(self, key: str) -> bytes | None:
        return self._blobs.get(key)

    def list(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self._blobs if k.startswith(prefix))

    def delete(self, key: str) -> None:
        self._blobs.pop(key, None)

"""Forward-only schema migrations for the blob store database."""

from __future__ import annotations

import sqlite3

_VERSION_TABLE = """
CREATE TABLE IF NOT EXISTS schema_version (
    version     INTEGER NOT NULL,
    applied_at  DATETIME NOT NULL DEFAULT (datetime('now'))
)
"""

_BLOBS_V1 = """
CREATE TABLE IF NOT EXISTS blobs (
    key             TEXT PRIMARY KEY,
    data            BLOB NOT NULL,
    content_type    TEXT NOT NULL DEFAULT 'application/octet-stream',
    private         INTEGER NOT NULL DEFAULT 1,
    updated_at      DATETIME NOT NULL DEFAULT (datetime('now'))
);
"""

# Never edit or reorder an applied entry; append a new version instead.
MIGRATIONS: list[tuple[int, str]] = [
    (1, _BLOBS_V1),
]

CURRENT_VERSION = MIGRATIONS[-1][0]


def current_version(conn: sqlite3.Connection) -> int:
    """Highest applied migration version (0 for a fresh database)."""
    conn.execute(_VERSION_TABLE)
    conn.commit()
    row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
    return row[0] or 0


def run_migrations(conn: sqlite3.Connection) -> int:
    """Bring *conn* up to CURRENT_VERSION and return the resulting version.

    Safe to call on every open.
    """
    applied = current_version(conn)
    pending = [(v, sql) for v, sql in MIGRATIONS if v > applied]
    for version, sql in pending:
        # executescript() commits any open transaction before it runs.
        conn.executescript(sql)
        conn.execute("INSERT INTO schema_version (version) VALUES (?)", (version,))
        conn.commit()
        applied = version
    return applied

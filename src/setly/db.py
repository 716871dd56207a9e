"""Key-value storage for setly.

All persisted data (team state, credential directory, director record,
session) lives under string keys holding JSON text. SqliteKeyValueStore is
the production backend; MemoryKeyValueStore is used by tests.
"""

import logging
import sqlite3
import time

logger = logging.getLogger("setly.db")


def get_db(db_path: str):
    """Get database connection with Row factory."""
    conn = sqlite3.connect(db_path, timeout=10.0)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str):
    """Initialize database with the key-value table.

    Handles migrations for schema changes.
    """
    logger.debug(f"Initializing database at {db_path}")
    db = get_db(db_path)
    try:
        db.execute("""
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at INTEGER NOT NULL
            )
        """)

        # Early databases had no updated_at column
        cursor = db.execute("PRAGMA table_info(kv)")
        columns = [col[1] for col in cursor.fetchall()]
        if "updated_at" not in columns:
            logger.info("Migrating database: adding updated_at column to kv")
            db.execute("ALTER TABLE kv ADD COLUMN updated_at INTEGER NOT NULL DEFAULT 0")

        db.commit()
    finally:
        db.close()


class SqliteKeyValueStore:
    """Key-value store backed by a single SQLite table."""

    def __init__(self, db_path):
        self.db_path = db_path
        init_db(db_path)

    def get(self, key):
        db = get_db(self.db_path)
        try:
            row = db.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        finally:
            db.close()
        return row["value"] if row else None

    def set(self, key, value):
        db = get_db(self.db_path)
        try:
            db.execute(
                "INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
                (key, value, int(time.time()))
            )
            db.commit()
        finally:
            db.close()

    def delete(self, key):
        db = get_db(self.db_path)
        try:
            db.execute("DELETE FROM kv WHERE key = ?", (key,))
            db.commit()
        finally:
            db.close()

    def keys(self):
        db = get_db(self.db_path)
        try:
            rows = db.execute("SELECT key FROM kv ORDER BY key").fetchall()
        finally:
            db.close()
        return [row["key"] for row in rows]


class MemoryKeyValueStore:
    """In-process key-value store with the same interface."""

    def __init__(self, initial=None):
        self._data = dict(initial or {})

    def get(self, key):
        return self._data.get(key)

    def set(self, key, value):
        self._data[key] = value

    def delete(self, key):
        self._data.pop(key, None)

    def keys(self):
        return sorted(self._data)

"""
SQLite storage gateway for scoped preferences.

The store is an explicit handle passed to every resolver and finder call.
Read failures are logged and degrade to an empty result; write failures are
logged and handed back to the caller as a value.
"""

import sqlite3
from contextlib import contextmanager
from typing import Generator, List, Optional, Sequence

from .config import ensure_db_directory, get_db_path
from .schema import PREFS_TABLE, Pref
from ..util.logging import logger

UPSERT_SQL = '''
    INSERT INTO prefs (value, user, channel, broker, plugin, pkey)
    VALUES (?, ?, ?, ?, ?, ?)
    ON CONFLICT (user, channel, broker, plugin, pkey)
    DO UPDATE SET value = excluded.value
'''


MEMORY_PATH = ":memory:"


def _decode_text(data: bytes) -> str:
    # Invalid UTF-8 survives as lone surrogates so the row can be flagged on its own
    return data.decode("utf-8", "surrogateescape")


class PrefsStore:
    """Durable (user, channel, broker, plugin, pkey) -> value relation."""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = str(db_path or get_db_path())
        self._memory_conn: Optional[sqlite3.Connection] = None
        if self.db_path != MEMORY_PATH:
            ensure_db_directory(self.db_path)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.text_factory = _decode_text
        return conn

    @contextmanager
    def get_db(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a SQLite database connection.

        File databases get a fresh connection per call. An in-memory database
        only lives as long as its connection, so that one is kept until close().
        """
        if self.db_path == MEMORY_PATH:
            if self._memory_conn is None:
                self._memory_conn = self._connect()
            yield self._memory_conn
            return

        conn = self._connect()
        try:
            yield conn
        finally:
            conn.close()

    def close(self):
        if self._memory_conn is not None:
            try:
                self._memory_conn.close()
            finally:
                self._memory_conn = None

    def ensure_schema(self):
        """Create the prefs table if it is missing. Safe to call repeatedly."""
        with self.get_db() as conn:
            conn.execute(PREFS_TABLE)
            conn.commit()

    def query(self, sql: str, params: Sequence = ()) -> List[tuple]:
        """Run a read and return raw rows, or an empty list if the backend fails."""
        try:
            self.ensure_schema()
            with self.get_db() as conn:
                return conn.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as e:
            logger.log_query_failure(sql, e)
            return []

    def upsert(self, pref: Pref) -> Optional[Exception]:
        """Insert or overwrite the row for the pref's exact scope and key.

        Returns None on success, otherwise the backend error.
        """
        try:
            self.ensure_schema()
            with self.get_db() as conn:
                conn.execute(
                    UPSERT_SQL,
                    (pref.value, pref.user, pref.channel, pref.broker, pref.plugin, pref.key)
                )
                conn.commit()
        except sqlite3.Error as e:
            logger.log_pref_operation("set", pref, "failed", {"error": str(e)[:100]})
            return e
        return None

    def count(self) -> int:
        """Number of stored rows."""
        rows = self.query("SELECT COUNT(*) FROM prefs")
        return rows[0][0] if rows else 0

    def health_check(self) -> bool:
        """Check that the database opens and holds the prefs table."""
        try:
            self.ensure_schema()
            with self.get_db() as conn:
                cursor = conn.execute(
                    "SELECT name FROM sqlite_master WHERE type='table' AND name='prefs'"
                )
                return cursor.fetchone() is not None
        except sqlite3.Error as e:
            logger.error(f"Database health check failed: {e}")
            return False

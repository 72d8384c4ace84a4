"""SQLite-backed key-value store for session records."""
import json
import sqlite3
import threading
import time
from contextlib import contextmanager
from typing import Any, Generator, Iterator, Optional
import logging

from .config import get_settings

log = logging.getLogger(__name__)


class KeyValueStore:
    """
    JSON values keyed by string with optional per-key expiry.
    Expired keys read as absent and are removed lazily on access,
    or in bulk by purge_expired().
    """

    def __init__(self, db_path: Optional[str] = None):
        self._db_path = db_path
        self._schema_ready = False
        self._lock = threading.Lock()

    @property
    def db_path(self) -> str:
        return self._db_path or get_settings().kv_db_path

    @contextmanager
    def _connect(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row  # Enable dict-like row access
        try:
            if not self._schema_ready:
                self._ensure_schema(conn)
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        with self._lock:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    expires_at REAL
                )
                """
            )
            conn.commit()
            self._schema_ready = True

    def get(self, key: str) -> Optional[Any]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value, expires_at FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
            if row is None:
                return None
            if row["expires_at"] is not None and row["expires_at"] <= time.time():
                conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
                log.debug(f"[KV] Expired {key}")
                return None
        return json.loads(row["value"])

    def set(self, key: str, value: Any, ex: Optional[int] = None) -> None:
        """Store ``value`` as JSON, expiring ``ex`` seconds from now when given."""
        expires_at = time.time() + ex if ex else None
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO kv_store (key, value, expires_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    expires_at = excluded.expires_at
                """,
                (key, json.dumps(value), expires_at),
            )

    def delete(self, key: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            return cursor.rowcount > 0

    def scan_iter(self, match: str = "*", count: int = 100) -> Iterator[str]:
        """
        Yield live keys matching a GLOB pattern, fetched in batches of ``count``.
        Keyset pagination keeps batches stable while keys are added or removed.
        """
        last_key = ""
        while True:
            with self._connect() as conn:
                rows = conn.execute(
                    """
                    SELECT key FROM kv_store
                    WHERE key GLOB ? AND key > ?
                      AND (expires_at IS NULL OR expires_at > ?)
                    ORDER BY key
                    LIMIT ?
                    """,
                    (match, last_key, time.time(), count),
                ).fetchall()
            if not rows:
                return
            for row in rows:
                yield row["key"]
            last_key = rows[-1]["key"]

    def purge_expired(self) -> int:
        """Delete every expired key. Returns the number removed."""
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM kv_store WHERE expires_at IS NOT NULL AND expires_at <= ?",
                (time.time(),),
            )
            removed = cursor.rowcount
        if removed:
            log.info(f"[KV] Purged {removed} expired keys")
        return removed


# Singleton instance
kv_store = KeyValueStore()


def get_kv_store() -> KeyValueStore:
    """FastAPI dependency; tests override it with a temporary store."""
    return kv_store

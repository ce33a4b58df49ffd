# dye_budget/storage/kv_store.py

"""Key-value backing stores for cached prices and user preferences.

Values are opaque strings.  A write may carry an expiry in seconds after
which the store is free to forget the key; readers never see an expired
value.
"""

import asyncio
import logging
import sqlite3
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path

from dye_budget.config.settings import Settings

logger = logging.getLogger("dye_budget.kv")

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS kv (
    key        TEXT PRIMARY KEY,
    value      TEXT NOT NULL,
    expires_at REAL
);

CREATE INDEX IF NOT EXISTS idx_kv_expires
    ON kv(expires_at);
"""


def _expires_at(expiration_ttl: int | None) -> float | None:
    """Absolute expiry time for a relative TTL (``None`` = never)."""
    if expiration_ttl is None:
        return None
    return time.time() + expiration_ttl


class KeyValueStore(ABC):
    """Async string key-value capability."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or ``None`` if absent or expired."""
        ...

    @abstractmethod
    async def put(
        self,
        key: str,
        value: str,
        expiration_ttl: int | None = None,
    ) -> None:
        """Store *value*, replacing any previous value for *key*."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove *key*; deleting a missing key is not an error."""
        ...

    def close(self) -> None:
        """Release resources held by the store."""
        return None


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store, expiry is checked lazily on read."""

    def __init__(self) -> None:
        self._data: dict[str, tuple[str, float | None]] = {}

    async def get(self, key: str) -> str | None:
        item = self._data.get(key)
        if item is None:
            return None
        value, expires_at = item
        if expires_at is not None and time.time() >= expires_at:
            del self._data[key]
            return None
        return value

    async def put(
        self,
        key: str,
        value: str,
        expiration_ttl: int | None = None,
    ) -> None:
        self._data[key] = (value, _expires_at(expiration_ttl))

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def expiry_of(self, key: str) -> float | None:
        """Absolute expiry timestamp recorded for *key*."""
        item = self._data.get(key)
        return item[1] if item else None

    def __len__(self) -> int:
        return len(self._data)


class SQLiteKeyValueStore(KeyValueStore):
    """Durable store in a single SQLite table.

    Blocking sqlite calls run in a worker thread so the event loop
    only suspends at the I/O boundary.
    """

    def __init__(self, db_path: Path | None = None) -> None:
        path = db_path or Settings.KV_DB_PATH
        path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(
            str(path), check_same_thread=False,
        )
        self._lock = threading.Lock()
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)
        logger.debug("SQLiteKeyValueStore opened at %s", path)

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    # ── Blocking helpers ─────────────────────────────────

    def _get(self, key: str) -> str | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT value, expires_at FROM kv WHERE key = ?",
                (key,),
            ).fetchone()
            if row is None:
                return None
            value, expires_at = row
            if expires_at is not None and time.time() >= expires_at:
                self._conn.execute(
                    "DELETE FROM kv WHERE key = ?", (key,),
                )
                self._conn.commit()
                return None
            return str(value)

    def _put(
        self, key: str, value: str, expiration_ttl: int | None,
    ) -> None:
        with self._lock:
            self._conn.execute(
                "INSERT INTO kv (key, value, expires_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET "
                "value=excluded.value, expires_at=excluded.expires_at",
                (key, value, _expires_at(expiration_ttl)),
            )
            self._conn.commit()

    def _delete(self, key: str) -> None:
        with self._lock:
            self._conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            self._conn.commit()

    def purge_expired(self) -> int:
        """Drop every expired row.  Returns the number removed."""
        with self._lock:
            cur = self._conn.execute(
                "DELETE FROM kv WHERE expires_at IS NOT NULL "
                "AND expires_at <= ?",
                (time.time(),),
            )
            self._conn.commit()
        if cur.rowcount:
            logger.debug("Purged %d expired kv rows", cur.rowcount)
        return cur.rowcount

    # ── Async surface ────────────────────────────────────

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._get, key)

    async def put(
        self,
        key: str,
        value: str,
        expiration_ttl: int | None = None,
    ) -> None:
        await asyncio.to_thread(self._put, key, value, expiration_ttl)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete, key)

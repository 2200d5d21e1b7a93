"""Cache storage backends.

A backend stores ``CacheEntry`` rows by key and knows nothing about translation. Expiry is
evaluated against the caller-supplied current time so that the facade owns the clock.
Backend failures are raised as ``CacheBackendError``.
"""

from __future__ import annotations

import asyncio
import json
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

from models.cache_models import CacheEntry, CacheStatistics
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

__all__: list[str] = [
    "CacheBackend",
    "CacheBackendError",
    "MemoryCacheBackend",
    "SQLiteCacheBackend",
    "key_kind",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

KEY_SEPARATOR: str = "::"


class CacheBackendError(Exception):
    """A cache backend operation failed."""


def key_kind(key: str) -> str:
    """Return the kind tag of a namespaced key ('translation::t::...' -> 't').

    Keys without a kind segment are reported as 'other'.
    """
    parts: list[str] = key.split(KEY_SEPARATOR)
    return parts[1] if len(parts) > 1 and parts[1] else "other"


class CacheBackend(ABC):
    """Abstract key/value store with per-entry expiry."""

    @abstractmethod
    async def open(self) -> None:
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        raise NotImplementedError

    @abstractmethod
    async def get(self, key: str, now_ms: int) -> CacheEntry | None:
        """Return the live entry for ``key``, or None when it is missing or expired."""
        raise NotImplementedError

    @abstractmethod
    async def put(self, entry: CacheEntry) -> None:
        """Insert or overwrite an entry. Last write wins."""
        raise NotImplementedError

    @abstractmethod
    async def delete_all(self) -> None:
        raise NotImplementedError

    @abstractmethod
    async def statistics(self, now_ms: int) -> CacheStatistics:
        raise NotImplementedError

    @abstractmethod
    async def cleanup_expired(self, now_ms: int) -> int:
        """Delete expired entries and return how many were removed."""
        raise NotImplementedError


class MemoryCacheBackend(CacheBackend):
    """Process-local dictionary backend. Expired entries are dropped lazily on read."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._lock: asyncio.Lock = asyncio.Lock()

    async def open(self) -> None:
        logger.debug("Memory cache backend opened")

    async def close(self) -> None:
        async with self._lock:
            self._entries.clear()

    async def get(self, key: str, now_ms: int) -> CacheEntry | None:
        async with self._lock:
            entry: CacheEntry | None = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(now_ms):
                del self._entries[key]
                return None
            return entry

    async def put(self, entry: CacheEntry) -> None:
        async with self._lock:
            self._entries[entry.key] = entry

    async def delete_all(self) -> None:
        async with self._lock:
            self._entries.clear()

    async def statistics(self, now_ms: int) -> CacheStatistics:
        async with self._lock:
            stats = CacheStatistics(total_entries=len(self._entries))
            for entry in self._entries.values():
                if entry.is_expired(now_ms):
                    stats.expired_entries += 1
                kind: str = key_kind(entry.key)
                stats.kind_distribution[kind] = stats.kind_distribution.get(kind, 0) + 1
            return stats

    async def cleanup_expired(self, now_ms: int) -> int:
        async with self._lock:
            expired: list[str] = [key for key, entry in self._entries.items() if entry.is_expired(now_ms)]
            for key in expired:
                del self._entries[key]
            return len(expired)


class SQLiteCacheBackend(CacheBackend):
    """SQLite backend in WAL mode. Values are stored JSON-encoded.

    Attributes:
        DB_SCHEMA_VERSION (ClassVar[int]): Cache database schema version.
    """

    DB_SCHEMA_VERSION: ClassVar[int] = 1

    def __init__(self, db_path: str | Path) -> None:
        self._db_path: Path = Path(db_path)
        self._db_conn: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        if self._db_conn is None:
            msg = "Cache database is not open"
            raise CacheBackendError(msg)
        return self._db_conn

    async def open(self) -> None:
        """Open the database with WAL mode and create the tables."""
        try:
            self._db_conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
            self._db_conn.execute("PRAGMA journal_mode=WAL")
            self._db_conn.execute(
                """
                CREATE TABLE IF NOT EXISTS cache_entries (
                    cache_key TEXT PRIMARY KEY,
                    kind TEXT NOT NULL,
                    value TEXT NOT NULL,
                    created_at INTEGER NOT NULL,
                    expires_at INTEGER NOT NULL
                )
                """
            )
            self._db_conn.execute("CREATE INDEX IF NOT EXISTS idx_expires_at ON cache_entries(expires_at)")
            self._db_conn.execute(
                """
                CREATE TABLE IF NOT EXISTS cache_metadata (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            self._db_conn.execute(
                "INSERT OR IGNORE INTO cache_metadata (key, value) VALUES (?, ?)",
                ("schema_version", str(self.DB_SCHEMA_VERSION)),
            )
            cursor: sqlite3.Cursor = self._db_conn.execute(
                "SELECT value FROM cache_metadata WHERE key = ?",
                ("schema_version",),
            )
            row = cursor.fetchone()
            if row is not None and row[0] != str(self.DB_SCHEMA_VERSION):
                logger.warning(
                    "Cache DB schema version mismatch (db: %s, expected: %s)",
                    row[0],
                    self.DB_SCHEMA_VERSION,
                )
            self._db_conn.commit()
            logger.info("Cache database opened with WAL mode: '%s'", self._db_path)
        except sqlite3.Error as err:
            msg: str = f"Database initialization failed: {err}"
            raise CacheBackendError(msg) from err

    async def close(self) -> None:
        if self._db_conn is None:
            return
        try:
            self._db_conn.close()
            logger.info("Database connection closed")
        except sqlite3.Error as err:
            msg: str = f"Error closing database connection: {err}"
            raise CacheBackendError(msg) from err
        finally:
            self._db_conn = None

    async def get(self, key: str, now_ms: int) -> CacheEntry | None:
        try:
            cursor: sqlite3.Cursor = self.connection.execute(
                "SELECT cache_key, value, created_at, expires_at FROM cache_entries WHERE cache_key = ?",
                (key,),
            )
            row = cursor.fetchone()
        except sqlite3.Error as err:
            msg: str = f"Error reading cache entry: {err}"
            raise CacheBackendError(msg) from err

        if row is None:
            return None
        entry = CacheEntry(key=row[0], value=self._decode(row[1]), created_at=row[2], expires_at=row[3])
        if entry.is_expired(now_ms):
            # Left for cleanup_expired() to purge.
            return None
        return entry

    async def put(self, entry: CacheEntry) -> None:
        try:
            self.connection.execute(
                """
                INSERT OR REPLACE INTO cache_entries (cache_key, kind, value, created_at, expires_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (entry.key, key_kind(entry.key), json.dumps(entry.value), entry.created_at, entry.expires_at),
            )
            self.connection.commit()
        except (sqlite3.Error, TypeError, ValueError) as err:
            msg: str = f"Error writing cache entry: {err}"
            raise CacheBackendError(msg) from err

    async def delete_all(self) -> None:
        try:
            self.connection.execute("DELETE FROM cache_entries")
            self.connection.commit()
        except sqlite3.Error as err:
            msg: str = f"Error clearing cache: {err}"
            raise CacheBackendError(msg) from err

    async def statistics(self, now_ms: int) -> CacheStatistics:
        try:
            stats = CacheStatistics()
            cursor: sqlite3.Cursor = self.connection.execute("SELECT COUNT(*) FROM cache_entries")
            stats.total_entries = cursor.fetchone()[0]
            cursor = self.connection.execute("SELECT COUNT(*) FROM cache_entries WHERE expires_at <= ?", (now_ms,))
            stats.expired_entries = cursor.fetchone()[0]
            cursor = self.connection.execute("SELECT kind, COUNT(*) FROM cache_entries GROUP BY kind")
            stats.kind_distribution = {row[0]: row[1] for row in cursor.fetchall()}
        except sqlite3.Error as err:
            msg: str = f"Error getting cache statistics: {err}"
            raise CacheBackendError(msg) from err
        else:
            return stats

    async def cleanup_expired(self, now_ms: int) -> int:
        try:
            cursor: sqlite3.Cursor = self.connection.execute(
                "DELETE FROM cache_entries WHERE expires_at <= ?",
                (now_ms,),
            )
            deleted: int = cursor.rowcount
            self.connection.commit()
        except sqlite3.Error as err:
            msg: str = f"Error during cache cleanup: {err}"
            raise CacheBackendError(msg) from err
        else:
            return deleted

    @staticmethod
    def _decode(raw: str) -> object:
        try:
            return json.loads(raw)
        except json.JSONDecodeError as err:
            msg: str = f"Corrupted cache value: {err}"
            raise CacheBackendError(msg) from err

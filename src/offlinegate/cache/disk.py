"""Persistent cache store backed by SQLite."""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from offlinegate.cache.store import CacheStore, NamedCache
from offlinegate.errors.exceptions import StoreFailure
from offlinegate.types import CachedResponse, RequestKey, ResponseType

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_DB_PATH = Path.home() / ".offlinegate" / "caches.db"


class DiskNamedCache(NamedCache):
    """Handle onto one cache's rows; ordering comes from the seq column."""

    def __init__(self, name: str, store: DiskCacheStore) -> None:
        super().__init__(name)
        self._store = store

    async def match(self, key: RequestKey) -> CachedResponse | None:
        return await self._store._run("match", self.name, self._match, key)

    async def put(self, key: RequestKey, response: CachedResponse) -> None:
        self._check_key(key)
        await self._store._run("put", self.name, self._put, key, response)

    async def delete(self, key: RequestKey) -> bool:
        return await self._store._run("delete", self.name, self._delete, key)

    async def keys(self) -> list[RequestKey]:
        return await self._store._run("keys", self.name, self._keys)

    def _match(self, conn: sqlite3.Connection, key: RequestKey) -> CachedResponse | None:
        row = conn.execute(
            """SELECT e.* FROM entries e JOIN caches c ON c.name = e.cache_name
               WHERE e.cache_name = ? AND e.method = ? AND e.url = ?""",
            (self.name, key.method, key.url),
        ).fetchone()
        return _row_to_response(row) if row else None

    def _put(self, conn: sqlite3.Connection, key: RequestKey, response: CachedResponse) -> None:
        exists = conn.execute("SELECT 1 FROM caches WHERE name = ?", (self.name,)).fetchone()
        if exists is None:
            raise StoreFailure(
                f"Cache '{self.name}' was deleted", operation="put", cache_name=self.name
            )
        seq = conn.execute("SELECT COALESCE(MAX(seq), 0) + 1 FROM entries").fetchone()[0]
        conn.execute(
            """INSERT OR REPLACE INTO entries
               (cache_name, method, url, seq, status, status_text,
                headers, body, response_url, type)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                self.name, key.method, key.url, seq,
                response.status, response.status_text,
                json.dumps(response.headers), response.body,
                response.url, response.type.value,
            ),
        )
        conn.commit()

    def _delete(self, conn: sqlite3.Connection, key: RequestKey) -> bool:
        cursor = conn.execute(
            "DELETE FROM entries WHERE cache_name = ? AND method = ? AND url = ?",
            (self.name, key.method, key.url),
        )
        conn.commit()
        return cursor.rowcount > 0

    def _keys(self, conn: sqlite3.Connection) -> list[RequestKey]:
        rows = conn.execute(
            "SELECT method, url FROM entries WHERE cache_name = ? ORDER BY seq ASC",
            (self.name,),
        ).fetchall()
        return [RequestKey(method=row["method"], url=row["url"]) for row in rows]


class DiskCacheStore(CacheStore):
    """SQLite-backed store; caches survive process restarts.

    Queries run in a worker thread and are serialised by a lock, so each
    single-key operation is atomic while the event loop stays free.
    """

    def __init__(self, db_path: Path | None = None) -> None:
        self._db_path = db_path or DEFAULT_DB_PATH
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._create_tables()

    async def open(self, name: str) -> NamedCache:
        await self._run("open", name, self._open, name)
        return DiskNamedCache(name, self)

    async def get(self, name: str) -> NamedCache | None:
        exists = await self._run("get", name, self._exists, name)
        return DiskNamedCache(name, self) if exists else None

    async def delete(self, name: str) -> bool:
        return await self._run("delete", name, self._delete, name)

    async def keys(self) -> list[str]:
        return await self._run("keys", "", self._names)

    async def close(self) -> None:
        with self._lock:
            self._conn.close()

    async def _run(
        self, operation: str, cache_name: str, fn: Callable[..., T], *args: Any
    ) -> T:
        def locked() -> T:
            with self._lock:
                return fn(self._conn, *args)

        try:
            return await asyncio.to_thread(locked)
        except sqlite3.Error as e:
            raise StoreFailure(
                f"SQLite {operation} failed on '{cache_name}': {e}",
                operation=operation,
                cache_name=cache_name,
            ) from e

    @staticmethod
    def _open(conn: sqlite3.Connection, name: str) -> None:
        seq = conn.execute("SELECT COALESCE(MAX(created_seq), 0) + 1 FROM caches").fetchone()[0]
        conn.execute(
            "INSERT OR IGNORE INTO caches (name, created_seq) VALUES (?, ?)", (name, seq)
        )
        conn.commit()

    @staticmethod
    def _exists(conn: sqlite3.Connection, name: str) -> bool:
        return conn.execute("SELECT 1 FROM caches WHERE name = ?", (name,)).fetchone() is not None

    @staticmethod
    def _delete(conn: sqlite3.Connection, name: str) -> bool:
        conn.execute("DELETE FROM entries WHERE cache_name = ?", (name,))
        cursor = conn.execute("DELETE FROM caches WHERE name = ?", (name,))
        conn.commit()
        return cursor.rowcount > 0

    @staticmethod
    def _names(conn: sqlite3.Connection) -> list[str]:
        rows = conn.execute("SELECT name FROM caches ORDER BY created_seq ASC").fetchall()
        return [row["name"] for row in rows]

    def _create_tables(self) -> None:
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS caches (
                name TEXT PRIMARY KEY,
                created_seq INTEGER
            )
        """)
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS entries (
                cache_name TEXT,
                method TEXT,
                url TEXT,
                seq INTEGER,
                status INTEGER,
                status_text TEXT,
                headers TEXT,
                body BLOB,
                response_url TEXT,
                type TEXT,
                PRIMARY KEY (cache_name, method, url)
            )
        """)
        self._conn.commit()


def _row_to_response(row: sqlite3.Row) -> CachedResponse:
    headers: dict[str, str] = {}
    try:
        headers = json.loads(row["headers"]) if row["headers"] else {}
    except (json.JSONDecodeError, TypeError):
        logger.debug("Discarding unreadable headers for %s", row["url"])

    return CachedResponse(
        status=row["status"],
        status_text=row["status_text"] or "",
        headers=headers,
        body=bytes(row["body"] or b""),
        url=row["response_url"] or "",
        type=ResponseType(row["type"] or ResponseType.BASIC),
    )

"""Bounded FIFO eviction for runtime caches."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from offlinegate.cache.store import CacheStore
from offlinegate.concurrency.detached import DetachedTasks

logger = logging.getLogger(__name__)


class BoundedCacheTrimmer:
    """Evicts the oldest-inserted entries once a cache exceeds its maximum.

    Eviction order is insertion order as reported by NamedCache.keys(), never
    recency of use. Concurrent inserts may leave a cache briefly one or two
    entries over its maximum; the next trim brings it back.
    """

    def __init__(self, store: CacheStore, tasks: DetachedTasks) -> None:
        self._store = store
        self._tasks = tasks

    async def trim(self, cache_name: str, max_entries: int) -> int:
        """Delete the oldest (count - max_entries) entries. Returns count evicted."""
        cache = await self._store.get(cache_name)
        if cache is None:
            return 0

        keys = await cache.keys()
        excess = len(keys) - max_entries
        if excess <= 0:
            return 0

        evicted = 0
        for key in keys[:excess]:
            if await cache.delete(key):
                evicted += 1
        logger.debug("Trimmed %d entries from '%s' (max %d)", evicted, cache_name, max_entries)
        return evicted

    def schedule(self, cache_name: str, max_entries: int) -> asyncio.Task[Any]:
        """Run trim() as a detached task; the caller never waits for it."""
        return self._tasks.spawn(
            self.trim(cache_name, max_entries), label=f"trim:{cache_name}"
        )

"""Strategy base — shared cache access and detached writes."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, ClassVar

from offlinegate.errors.exceptions import StoreFailure
from offlinegate.types import CachedResponse, ProxyRequest, RequestCategory, RequestKey

if TYPE_CHECKING:
    from offlinegate.cache.store import CacheStore
    from offlinegate.concurrency.detached import DetachedTasks
    from offlinegate.network.fetcher import Fetcher

logger = logging.getLogger(__name__)


class CacheStrategy(ABC):
    """A fixed algorithm applied to every request of one category.

    handle() always resolves to a response. Cache reads that fail count as
    misses; cache writes happen off the request path and their failures are
    dropped. Writes are also dropped while can_write() returns False.
    """

    category: ClassVar[RequestCategory]

    def __init__(
        self,
        store: CacheStore,
        fetcher: Fetcher,
        tasks: DetachedTasks,
        can_write: Callable[[], bool] | None = None,
    ) -> None:
        self._store = store
        self._fetcher = fetcher
        self._tasks = tasks
        self._can_write = can_write

    @abstractmethod
    async def handle(self, request: ProxyRequest) -> CachedResponse: ...

    @abstractmethod
    def unavailable(self, request: ProxyRequest) -> CachedResponse:
        """Answer used when neither network nor cache can serve the request."""

    async def _match_in(self, cache_name: str, key: RequestKey) -> CachedResponse | None:
        try:
            cache = await self._store.get(cache_name)
            return await cache.match(key) if cache is not None else None
        except StoreFailure as e:
            logger.debug("Cache read from '%s' failed, treating as miss: %s", cache_name, e)
            return None

    async def _match_any(self, key: RequestKey) -> CachedResponse | None:
        try:
            return await self._store.match(key)
        except StoreFailure as e:
            logger.debug("Cache lookup for %s failed, treating as miss: %s", key, e)
            return None

    def _store_detached(
        self, cache_name: str, key: RequestKey, response: CachedResponse
    ) -> None:
        # Result intentionally discarded; a failed write is never retried
        self._tasks.spawn(
            self._put(cache_name, key, response.clone()), label=f"put:{cache_name}"
        )

    async def _put(self, cache_name: str, key: RequestKey, response: CachedResponse) -> bool:
        if self._can_write is not None and not self._can_write():
            logger.debug("Generation superseded, dropped cache write for %s", key)
            return False
        try:
            cache = await self._store.open(cache_name)
            await cache.put(key, response)
        except StoreFailure as e:
            logger.debug("Dropped cache write for %s into '%s': %s", key, cache_name, e)
            return False
        return True

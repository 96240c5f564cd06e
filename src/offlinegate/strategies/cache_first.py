"""Cache-first strategies for images and other same-origin reads."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from offlinegate.cache.keys import request_key, url_origin
from offlinegate.errors.exceptions import NetworkFailure
from offlinegate.strategies.base import CacheStrategy
from offlinegate.types import CachedResponse, ProxyRequest, RequestCategory, RequestKey

if TYPE_CHECKING:
    from offlinegate.cache.store import CacheStore
    from offlinegate.cache.trimmer import BoundedCacheTrimmer
    from offlinegate.concurrency.detached import DetachedTasks
    from offlinegate.network.fetcher import Fetcher

logger = logging.getLogger(__name__)


class CacheFirstWithNetworkFallback(CacheStrategy):
    """Serve from one bounded cache; populate it from the network on a miss."""

    category = RequestCategory.OTHER

    def __init__(
        self,
        store: CacheStore,
        fetcher: Fetcher,
        tasks: DetachedTasks,
        trimmer: BoundedCacheTrimmer,
        cache_name: str,
        max_entries: int,
        can_write: Callable[[], bool] | None = None,
    ) -> None:
        super().__init__(store, fetcher, tasks, can_write)
        self._trimmer = trimmer
        self._cache_name = cache_name
        self._max_entries = max_entries

    @property
    def cache_name(self) -> str:
        return self._cache_name

    async def handle(self, request: ProxyRequest) -> CachedResponse:
        key = request_key(request)
        cached = await self.lookup(key)
        if cached is not None:
            logger.debug("Cache hit for %s", request.url)
            return cached

        try:
            response = await self._fetcher.fetch(request)
        except NetworkFailure as e:
            logger.info("Fetch of %s failed (%s)", request.url, e)
            return await self.on_network_failure(request)

        if self.is_cacheable(request, response):
            self._tasks.spawn(
                self._put_then_trim(key, response.clone()), label=f"populate:{self._cache_name}"
            )
        return response

    async def lookup(self, key: RequestKey) -> CachedResponse | None:
        return await self._match_in(self._cache_name, key)

    def is_cacheable(self, request: ProxyRequest, response: CachedResponse) -> bool:
        return response.status == 200

    async def on_network_failure(self, request: ProxyRequest) -> CachedResponse:
        return self.unavailable(request)

    def unavailable(self, request: ProxyRequest) -> CachedResponse:
        return CachedResponse(status=503, status_text="Service Unavailable", url=request.url)

    async def _put_then_trim(self, key: RequestKey, response: CachedResponse) -> None:
        if await self._put(self._cache_name, key, response):
            self._trimmer.schedule(self._cache_name, self._max_entries)


class ImageCacheFirst(CacheFirstWithNetworkFallback):
    """Images: on failure serve the fallback icon, else a network error."""

    category = RequestCategory.IMAGE

    def __init__(
        self,
        store: CacheStore,
        fetcher: Fetcher,
        tasks: DetachedTasks,
        trimmer: BoundedCacheTrimmer,
        cache_name: str,
        max_entries: int,
        fallback_icon_url: str,
        can_write: Callable[[], bool] | None = None,
    ) -> None:
        super().__init__(store, fetcher, tasks, trimmer, cache_name, max_entries, can_write)
        self._fallback_key = request_key(fallback_icon_url)

    async def on_network_failure(self, request: ProxyRequest) -> CachedResponse:
        icon = await self._match_in(self._cache_name, self._fallback_key)
        if icon is None:
            # The icon is normally precached into the primary cache
            icon = await self._match_any(self._fallback_key)
        return icon if icon is not None else self.unavailable(request)

    def unavailable(self, request: ProxyRequest) -> CachedResponse:
        # Image consumers expect a failed fetch, not substitute content
        return CachedResponse.error()


class RuntimeCacheFirst(CacheFirstWithNetworkFallback):
    """Other GETs: runtime cache, then the precached primary cache, then network.

    Only same-origin 200s are written, always to the runtime cache. Failure is a 503.
    """

    category = RequestCategory.OTHER

    def __init__(
        self,
        store: CacheStore,
        fetcher: Fetcher,
        tasks: DetachedTasks,
        trimmer: BoundedCacheTrimmer,
        cache_name: str,
        max_entries: int,
        origin: str,
        primary_cache: str | None = None,
        can_write: Callable[[], bool] | None = None,
    ) -> None:
        super().__init__(store, fetcher, tasks, trimmer, cache_name, max_entries, can_write)
        self._origin = url_origin(origin)
        self._primary_cache = primary_cache

    async def lookup(self, key: RequestKey) -> CachedResponse | None:
        cached = await super().lookup(key)
        if cached is None and self._primary_cache is not None:
            cached = await self._match_in(self._primary_cache, key)
        return cached

    def is_cacheable(self, request: ProxyRequest, response: CachedResponse) -> bool:
        return response.status == 200 and url_origin(request.url) == self._origin

"""Network-first strategy for navigation requests."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from offlinegate.cache.keys import request_key
from offlinegate.errors.exceptions import NetworkFailure
from offlinegate.strategies.base import CacheStrategy
from offlinegate.types import CachedResponse, ProxyRequest, RequestCategory

if TYPE_CHECKING:
    from offlinegate.cache.store import CacheStore
    from offlinegate.concurrency.detached import DetachedTasks
    from offlinegate.network.fetcher import Fetcher

logger = logging.getLogger(__name__)

_OFFLINE_BODY = b"<!doctype html><title>Offline</title><h1>Offline</h1><p>This page is not available offline.</p>"


class NetworkFirstWithFallback(CacheStrategy):
    """Live document when the network answers, best cached document when not.

    Fallback order after a network failure:
      1. exact cached match for the request (any cache)
      2. the offline document (any cache)
      3. the primary document in the primary cache
      4. a synthesized 503 HTML page
    """

    category = RequestCategory.NAVIGATION

    def __init__(
        self,
        store: CacheStore,
        fetcher: Fetcher,
        tasks: DetachedTasks,
        primary_cache: str,
        document_url: str,
        offline_url: str,
        can_write: Callable[[], bool] | None = None,
    ) -> None:
        super().__init__(store, fetcher, tasks, can_write)
        self._primary_cache = primary_cache
        self._document_key = request_key(document_url)
        self._offline_key = request_key(offline_url)

    async def handle(self, request: ProxyRequest) -> CachedResponse:
        try:
            response = await self._fetcher.fetch(request)
        except NetworkFailure as e:
            logger.info("Navigation to %s failed (%s), serving cached fallback", request.url, e)
            return await self._fallback(request)

        if response.ok:
            # Refresh the offline copy of the app shell off the request path
            self._store_detached(self._primary_cache, self._document_key, response)
        return response

    def unavailable(self, request: ProxyRequest) -> CachedResponse:
        return CachedResponse(
            status=503,
            status_text="Service Unavailable",
            headers={"content-type": "text/html; charset=utf-8"},
            body=_OFFLINE_BODY,
            url=request.url,
        )

    async def _fallback(self, request: ProxyRequest) -> CachedResponse:
        cached = await self._match_any(request_key(request))
        if cached is None:
            cached = await self._match_any(self._offline_key)
        if cached is None:
            cached = await self._match_in(self._primary_cache, self._document_key)
        if cached is None:
            logger.debug("No cached document for %s, synthesizing offline page", request.url)
            return self.unavailable(request)
        return cached

"""Request routing — the interception point every request passes through."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from offlinegate.concurrency.pool import RequestPool
from offlinegate.config.defaults import DEFAULT_IMAGE_EXTENSIONS
from offlinegate.errors.exceptions import NetworkFailure
from offlinegate.routing.classifier import classify
from offlinegate.types import CachedResponse, ProxyRequest, RequestCategory

if TYPE_CHECKING:
    from offlinegate.network.fetcher import Fetcher
    from offlinegate.strategies.base import CacheStrategy

logger = logging.getLogger(__name__)


class RequestRouter:
    """Classifies each request and hands it to the matching strategy.

    handle() never raises: bypassed requests that fail on the network come
    back as the network-error result, and anything a strategy raises is
    converted into that strategy's unavailable() response.
    """

    def __init__(
        self,
        strategies: dict[RequestCategory, CacheStrategy],
        fetcher: Fetcher,
        image_extensions: Iterable[str] = DEFAULT_IMAGE_EXTENSIONS,
        pool: RequestPool | None = None,
    ) -> None:
        missing = {
            RequestCategory.NAVIGATION,
            RequestCategory.IMAGE,
            RequestCategory.OTHER,
        } - strategies.keys()
        if missing:
            raise ValueError(f"No strategy for: {', '.join(sorted(missing))}")
        self._strategies = strategies
        self._fetcher = fetcher
        self._image_extensions = tuple(image_extensions)
        self._pool = pool or RequestPool()

    def classify(self, request: ProxyRequest) -> RequestCategory:
        return classify(request, self._image_extensions)

    async def handle(self, request: ProxyRequest) -> CachedResponse:
        category = self.classify(request)
        if category == RequestCategory.BYPASS:
            return await self._passthrough(request)

        strategy = self._strategies[category]
        try:
            return await strategy.handle(request)
        except Exception:
            logger.exception("%s strategy failed for %s", category.value, request.url)
            return strategy.unavailable(request)

    async def handle_many(self, requests: list[ProxyRequest]) -> list[CachedResponse]:
        """Handle a batch concurrently; results are in input order."""
        return await self._pool.dispatch(self.handle, requests)

    async def _passthrough(self, request: ProxyRequest) -> CachedResponse:
        logger.debug("Bypassing caches for %s %s", request.method, request.url)
        try:
            return await self._fetcher.fetch(request)
        except NetworkFailure as e:
            logger.info("%s %s failed: %s", request.method, request.url, e)
            return CachedResponse.error()

"""Bounded async dispatch of many intercepted requests."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from offlinegate.types import CachedResponse, ProxyRequest

logger = logging.getLogger(__name__)


class RequestPool:
    """Runs each request as its own task, at most max_workers at a time.

    Results come back in input order. A handler that raises yields the
    network-error result for that request instead of failing the batch.
    """

    def __init__(self, max_workers: int = 10) -> None:
        self._max_workers = max_workers

    async def dispatch(
        self,
        handler: Callable[[ProxyRequest], Awaitable[CachedResponse]],
        requests: list[ProxyRequest],
    ) -> list[CachedResponse]:
        semaphore = asyncio.Semaphore(self._max_workers)

        async def worker(request: ProxyRequest) -> CachedResponse:
            async with semaphore:
                return await handler(request)

        results = await asyncio.gather(*(worker(r) for r in requests), return_exceptions=True)

        final: list[CachedResponse] = []
        for request, result in zip(requests, results, strict=True):
            if isinstance(result, BaseException):
                logger.error("Request %s %s failed: %s", request.method, request.url, result)
                final.append(CachedResponse.error())
            else:
                final.append(result)
        return final

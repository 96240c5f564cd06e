"""Network access — the only place requests leave the proxy."""

from __future__ import annotations

import logging
from typing import Protocol

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from offlinegate.errors.exceptions import NetworkFailure
from offlinegate.types import CachedResponse, ProxyRequest

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 10.0


class Fetcher(Protocol):
    """Anything that can turn a request into a response.

    Raises NetworkFailure when no response could be obtained at all.
    """

    async def fetch(self, request: ProxyRequest) -> CachedResponse: ...

    async def close(self) -> None: ...


class HttpxFetcher:
    """Fetcher backed by httpx.AsyncClient.

    HTTP error statuses come back as responses. Transport errors are retried
    up to `attempts` times. Every request error (redirect loops and
    undecodable bodies included) surfaces as NetworkFailure.
    """

    def __init__(
        self,
        timeout: float = _DEFAULT_TIMEOUT,
        attempts: int = 1,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )
        self._attempts = max(1, attempts)

    async def fetch(self, request: ProxyRequest) -> CachedResponse:
        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(httpx.TransportError),
                wait=wait_exponential(multiplier=0.5, min=0.5, max=8),
                stop=stop_after_attempt(self._attempts),
                reraise=True,
            ):
                with attempt:
                    response = await self._client.request(
                        request.method,
                        request.url,
                        headers=request.headers,
                    )
        except (httpx.RequestError, httpx.InvalidURL) as e:
            logger.debug("Network failure for %s: %s", request.url, e)
            raise NetworkFailure(str(e), url=request.url, original=e) from e

        return self._to_cached(response)

    async def close(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _to_cached(response: httpx.Response) -> CachedResponse:
        return CachedResponse(
            status=response.status_code,
            status_text=response.reason_phrase,
            headers=dict(response.headers),
            body=response.content,
            url=str(response.url),
        )

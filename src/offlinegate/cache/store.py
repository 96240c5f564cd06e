"""Cache store interfaces — named, persistent request→response mappings."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from offlinegate.errors.exceptions import StoreFailure
from offlinegate.types import CachedResponse, RequestKey

logger = logging.getLogger(__name__)


class NamedCache(ABC):
    """One named cache: RequestKey → CachedResponse in insertion order.

    Implementations guarantee atomic single-key match/put/delete only.
    Once the cache has been deleted from its store, match() misses and
    put() raises StoreFailure.
    """

    def __init__(self, name: str) -> None:
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @abstractmethod
    async def match(self, key: RequestKey) -> CachedResponse | None: ...

    @abstractmethod
    async def put(self, key: RequestKey, response: CachedResponse) -> None: ...

    @abstractmethod
    async def delete(self, key: RequestKey) -> bool: ...

    @abstractmethod
    async def keys(self) -> list[RequestKey]:
        """Keys ordered oldest insertion first."""

    def _check_key(self, key: RequestKey) -> None:
        if key.method != "GET":
            raise StoreFailure(
                f"Only GET requests can be cached, got {key.method}",
                operation="put",
                cache_name=self._name,
            )


class CacheStore(ABC):
    """A set of named caches shared by every in-flight request."""

    @abstractmethod
    async def open(self, name: str) -> NamedCache:
        """Return the named cache, creating it if needed."""

    @abstractmethod
    async def get(self, name: str) -> NamedCache | None:
        """Return the named cache if it exists, without creating it."""

    async def has(self, name: str) -> bool:
        return await self.get(name) is not None

    @abstractmethod
    async def delete(self, name: str) -> bool: ...

    @abstractmethod
    async def keys(self) -> list[str]:
        """Cache names in creation order."""

    async def match(self, key: RequestKey) -> CachedResponse | None:
        """Search every cache in creation order; first hit wins."""
        for name in await self.keys():
            cache = await self.get(name)
            if cache is None:
                continue
            response = await cache.match(key)
            if response is not None:
                return response
        return None

    async def entry_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for name in await self.keys():
            cache = await self.get(name)
            if cache is None:
                continue
            counts[name] = len(await cache.keys())
        return counts

    async def close(self) -> None:
        """Release backing resources."""

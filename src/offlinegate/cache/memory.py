"""In-memory cache store with sequence-numbered insertion order."""

from __future__ import annotations

import itertools
from collections import OrderedDict

from offlinegate.cache.store import CacheStore, NamedCache
from offlinegate.errors.exceptions import StoreFailure
from offlinegate.types import CachedResponse, RequestKey


class MemoryNamedCache(NamedCache):
    """Entries keyed by RequestKey, each stamped with a store-wide sequence number."""

    def __init__(self, name: str, store: MemoryCacheStore) -> None:
        super().__init__(name)
        self._store = store
        self._entries: OrderedDict[RequestKey, tuple[int, CachedResponse]] = OrderedDict()
        self._deleted = False

    async def match(self, key: RequestKey) -> CachedResponse | None:
        if self._deleted:
            return None
        item = self._entries.get(key)
        if item is None:
            return None
        return item[1].clone()

    async def put(self, key: RequestKey, response: CachedResponse) -> None:
        self._check_key(key)
        if self._deleted:
            raise StoreFailure(
                f"Cache '{self.name}' was deleted", operation="put", cache_name=self.name
            )
        # Re-put moves the key to the end
        self._entries.pop(key, None)
        self._entries[key] = (self._store.next_sequence(), response.clone())

    async def delete(self, key: RequestKey) -> bool:
        return self._entries.pop(key, None) is not None

    async def keys(self) -> list[RequestKey]:
        if self._deleted:
            return []
        ordered = sorted(self._entries.items(), key=lambda item: item[1][0])
        return [key for key, _ in ordered]

    def _detach(self) -> None:
        self._deleted = True
        self._entries.clear()


class MemoryCacheStore(CacheStore):
    """Process-local store; caches live as long as the instance."""

    def __init__(self) -> None:
        self._caches: OrderedDict[str, MemoryNamedCache] = OrderedDict()
        self._sequence = itertools.count(1)

    def next_sequence(self) -> int:
        return next(self._sequence)

    async def open(self, name: str) -> NamedCache:
        cache = self._caches.get(name)
        if cache is None:
            cache = MemoryNamedCache(name, self)
            self._caches[name] = cache
        return cache

    async def get(self, name: str) -> NamedCache | None:
        return self._caches.get(name)

    async def delete(self, name: str) -> bool:
        cache = self._caches.pop(name, None)
        if cache is None:
            return False
        cache._detach()
        return True

    async def keys(self) -> list[str]:
        return list(self._caches)

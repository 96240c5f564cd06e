"""Cache subsystem — named request caches, generation naming and FIFO trimming."""

from offlinegate.cache.disk import DiskCacheStore
from offlinegate.cache.keys import GenerationNames, request_key, resolve_url
from offlinegate.cache.memory import MemoryCacheStore
from offlinegate.cache.store import CacheStore, NamedCache
from offlinegate.cache.trimmer import BoundedCacheTrimmer

__all__ = [
    "BoundedCacheTrimmer",
    "CacheStore",
    "DiskCacheStore",
    "GenerationNames",
    "MemoryCacheStore",
    "NamedCache",
    "request_key",
    "resolve_url",
]

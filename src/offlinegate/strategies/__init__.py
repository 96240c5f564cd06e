"""Caching strategies — one fixed algorithm per request category."""

from offlinegate.strategies.base import CacheStrategy
from offlinegate.strategies.cache_first import (
    CacheFirstWithNetworkFallback,
    ImageCacheFirst,
    RuntimeCacheFirst,
)
from offlinegate.strategies.network_first import NetworkFirstWithFallback

__all__ = [
    "CacheStrategy",
    "CacheFirstWithNetworkFallback",
    "ImageCacheFirst",
    "NetworkFirstWithFallback",
    "RuntimeCacheFirst",
]

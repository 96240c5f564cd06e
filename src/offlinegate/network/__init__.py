"""Network access for intercepted requests."""

from offlinegate.network.fetcher import Fetcher, HttpxFetcher

__all__ = ["Fetcher", "HttpxFetcher"]

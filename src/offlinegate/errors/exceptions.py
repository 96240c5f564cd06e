"""Custom exception hierarchy for offlinegate."""

from __future__ import annotations

from typing import Any


class OfflineGateError(Exception):
    """Base exception for all offlinegate errors."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message


class NetworkFailure(OfflineGateError):
    """The network call itself failed (no response at all).

    Examples: connection refused, DNS failure, timeout, invalid URL.
    HTTP error statuses are responses, not failures.
    """

    def __init__(
        self,
        message: str = "",
        url: str = "",
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.original = original


class AssetPopulationFailure(OfflineGateError):
    """A precache asset could not be fetched or stored. Non-fatal during install."""

    def __init__(
        self,
        message: str = "",
        url: str = "",
        status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class StoreFailure(OfflineGateError):
    """A cache store operation failed. Write paths always swallow it."""

    def __init__(
        self,
        message: str = "",
        operation: str = "put",
        cache_name: str = "",
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.cache_name = cache_name


class LifecycleError(OfflineGateError):
    """An install/activate transition was requested from the wrong state."""

    def __init__(self, message: str = "", state: str = "") -> None:
        super().__init__(message)
        self.state = state

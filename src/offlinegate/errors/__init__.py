"""Error handling — exception taxonomy for population, network, store and lifecycle."""

from offlinegate.errors.exceptions import (
    AssetPopulationFailure,
    LifecycleError,
    NetworkFailure,
    OfflineGateError,
    StoreFailure,
)

__all__ = [
    "OfflineGateError",
    "NetworkFailure",
    "AssetPopulationFailure",
    "StoreFailure",
    "LifecycleError",
]

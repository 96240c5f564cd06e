"""Generation lifecycle — install, wait, activate and sweep stale caches."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from offlinegate.cache.keys import PERSIST_PREFIX, GenerationNames, is_persisted
from offlinegate.errors.exceptions import (
    AssetPopulationFailure,
    LifecycleError,
    NetworkFailure,
    StoreFailure,
)
from offlinegate.lifecycle.clients import ClientRegistry
from offlinegate.types import (
    ActivationReport,
    CachedResponse,
    InstallReport,
    LifecycleState,
    ProxyRequest,
    RequestKey,
)

if TYPE_CHECKING:
    from offlinegate.cache.store import CacheStore, NamedCache
    from offlinegate.network.fetcher import Fetcher

logger = logging.getLogger(__name__)


class GenerationManager:
    """Owns one versioned generation of caches.

    State machine:
        new → installing → installed (waiting) → activating → activated → redundant

    Install always completes, even if some manifest assets could not be
    cached. A generation waits in `installed` while any open client is still
    controlled by another generation, unless skip_waiting() was requested.
    Once a newer generation sharing the ClientRegistry activates, this one
    reports `redundant`.
    """

    def __init__(
        self,
        store: CacheStore,
        fetcher: Fetcher,
        names: GenerationNames,
        manifest: list[str] | None = None,
        clients: ClientRegistry | None = None,
        persist_prefix: str = PERSIST_PREFIX,
        skip_waiting: bool = False,
    ) -> None:
        self._store = store
        self._fetcher = fetcher
        self._names = names
        # Absolute URLs, duplicates dropped, order kept
        self._manifest = list(dict.fromkeys(manifest or []))
        self._clients = clients if clients is not None else ClientRegistry()
        self._persist_prefix = persist_prefix
        self._skip_waiting = skip_waiting
        self._state = LifecycleState.NEW
        self._install_report: InstallReport | None = None
        self._activation_report: ActivationReport | None = None

    @property
    def names(self) -> GenerationNames:
        return self._names

    @property
    def state(self) -> LifecycleState:
        if (
            self._state == LifecycleState.ACTIVATED
            and self._clients.current != self._names.primary
        ):
            return LifecycleState.REDUNDANT
        return self._state

    @property
    def is_waiting(self) -> bool:
        return self._state == LifecycleState.INSTALLED

    @property
    def is_active(self) -> bool:
        return self.state == LifecycleState.ACTIVATED

    @property
    def is_redundant(self) -> bool:
        """A newer generation sharing our ClientRegistry has activated."""
        return self.state == LifecycleState.REDUNDANT

    @property
    def clients(self) -> ClientRegistry:
        return self._clients

    @property
    def install_report(self) -> InstallReport | None:
        return self._install_report

    @property
    def activation_report(self) -> ActivationReport | None:
        return self._activation_report

    async def install(self) -> InstallReport:
        """Populate the primary cache from the manifest, best effort."""
        if self._state != LifecycleState.NEW:
            raise LifecycleError(
                f"Cannot install generation '{self._names.primary}' from state '{self._state}'",
                state=self._state,
            )
        self._state = LifecycleState.INSTALLING
        logger.info("Installing generation '%s'", self._names.primary)

        try:
            cache = await self._store.open(self._names.primary)
        except StoreFailure as e:
            logger.warning("Cannot open '%s', installing with an empty cache: %s",
                           self._names.primary, e)
            report = InstallReport(
                cache_name=self._names.primary, failed=list(self._manifest), bulk=False
            )
        else:
            report = await self._populate(cache)

        self._install_report = report
        self._state = LifecycleState.INSTALLED
        logger.info(
            "Installed '%s': %d cached, %d failed",
            self._names.primary, len(report.cached), len(report.failed),
        )

        await self._activate_if_unblocked()
        return report

    async def activate(self) -> ActivationReport:
        """Delete stale caches and take control of every open client."""
        if self._state == LifecycleState.ACTIVATED and self._activation_report is not None:
            return self._activation_report
        if self._state != LifecycleState.INSTALLED:
            raise LifecycleError(
                f"Cannot activate generation '{self._names.primary}' from state '{self._state}'",
                state=self._state,
            )
        self._state = LifecycleState.ACTIVATING
        logger.info("Activating generation '%s'", self._names.primary)

        deleted = await self._sweep()
        claimed = self._clients.claim(self._names.primary)

        self._activation_report = ActivationReport(deleted=deleted, clients_claimed=claimed)
        self._state = LifecycleState.ACTIVATED
        return self._activation_report

    async def skip_waiting(self) -> None:
        """Force waiting → activating without waiting for other clients to close.

        Called before install finishes, activation follows install directly.
        """
        self._skip_waiting = True
        await self._activate_if_unblocked()

    def connect_client(self, client_id: str) -> None:
        controller = self._names.primary if self.is_active else None
        self._clients.connect(client_id, controller)

    async def release_client(self, client_id: str) -> None:
        """An open client session closed; a waiting generation may now activate."""
        self._clients.disconnect(client_id)
        await self._activate_if_unblocked()

    async def _activate_if_unblocked(self) -> ActivationReport | None:
        if self._state != LifecycleState.INSTALLED:
            return None
        blockers = self._clients.controlled_by_other(self._names.primary)
        if self._skip_waiting or not blockers:
            return await self.activate()
        logger.info(
            "Generation '%s' waiting on %d client(s) of an older generation",
            self._names.primary, len(blockers),
        )
        return None

    async def _populate(self, cache: NamedCache) -> InstallReport:
        try:
            await self._add_all(cache)
            return InstallReport(cache_name=cache.name, cached=list(self._manifest))
        except AssetPopulationFailure as e:
            logger.warning("Bulk precache failed (%s), falling back to individual adds", e)

        cached: list[str] = []
        failed: list[str] = []
        for url in self._manifest:
            try:
                await self._add(cache, url)
                cached.append(url)
            except AssetPopulationFailure as e:
                logger.warning("Failed to cache %s: %s", url, e)
                failed.append(url)
        return InstallReport(cache_name=cache.name, cached=cached, failed=failed, bulk=False)

    async def _add_all(self, cache: NamedCache) -> None:
        """All-or-nothing: nothing is written unless every asset fetched OK."""
        results = await asyncio.gather(
            *(self._fetch_asset(url) for url in self._manifest),
            return_exceptions=True,
        )
        for url, result in zip(self._manifest, results, strict=True):
            if isinstance(result, AssetPopulationFailure):
                raise result
            if isinstance(result, BaseException):
                raise AssetPopulationFailure(str(result), url=url) from result

        for url, response in zip(self._manifest, results, strict=True):
            await self._put(cache, url, response)

    async def _add(self, cache: NamedCache, url: str) -> None:
        response = await self._fetch_asset(url)
        await self._put(cache, url, response)

    async def _fetch_asset(self, url: str) -> CachedResponse:
        try:
            response = await self._fetcher.fetch(ProxyRequest(url=url))
        except NetworkFailure as e:
            raise AssetPopulationFailure(f"{url}: {e}", url=url) from e
        if not response.ok:
            raise AssetPopulationFailure(
                f"{url}: HTTP {response.status}", url=url, status=response.status
            )
        return response

    @staticmethod
    async def _put(cache: NamedCache, url: str, response: CachedResponse) -> None:
        try:
            await cache.put(RequestKey(method="GET", url=url), response)
        except StoreFailure as e:
            raise AssetPopulationFailure(f"{url}: {e}", url=url) from e

    async def _sweep(self) -> list[str]:
        """Delete every cache that is neither ours nor persisted."""
        try:
            names = await self._store.keys()
        except StoreFailure as e:
            logger.warning("Cannot list caches, skipping sweep: %s", e)
            return []

        stale = [
            name
            for name in names
            if not self._names.owns(name) and not is_persisted(name, self._persist_prefix)
        ]
        results = await asyncio.gather(
            *(self._store.delete(name) for name in stale),
            return_exceptions=True,
        )

        deleted: list[str] = []
        for name, result in zip(stale, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning("Failed to delete stale cache '%s': %s", name, result)
            elif result:
                logger.info("Deleted stale cache '%s'", name)
                deleted.append(name)
        return deleted

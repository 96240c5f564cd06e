"""Top-level entry point: the OfflineGate service."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from offlinegate.cache.disk import DiskCacheStore
from offlinegate.cache.memory import MemoryCacheStore
from offlinegate.cache.store import CacheStore
from offlinegate.cache.trimmer import BoundedCacheTrimmer
from offlinegate.concurrency.detached import DetachedTasks
from offlinegate.concurrency.pool import RequestPool
from offlinegate.config.schema import ProxyConfig
from offlinegate.lifecycle.clients import ClientRegistry
from offlinegate.lifecycle.control import ControlChannel
from offlinegate.lifecycle.generation import GenerationManager
from offlinegate.network.fetcher import Fetcher, HttpxFetcher
from offlinegate.routing.router import RequestRouter
from offlinegate.strategies.cache_first import ImageCacheFirst, RuntimeCacheFirst
from offlinegate.strategies.network_first import NetworkFirstWithFallback
from offlinegate.types import (
    ActivationReport,
    CachedResponse,
    ControlMessage,
    InstallReport,
    ProxyRequest,
    RequestCategory,
    RequestMode,
)

logger = logging.getLogger(__name__)


class OfflineGate:
    """One proxy instance with explicit lifecycle control.

    Nothing is torn down implicitly; call close() when done. Instances
    sharing a store (and a ClientRegistry) model successive generations of
    the same application.
    """

    def __init__(
        self,
        config: ProxyConfig | None = None,
        store: CacheStore | None = None,
        fetcher: Fetcher | None = None,
        clients: ClientRegistry | None = None,
    ) -> None:
        self._config = config or ProxyConfig()
        cfg = self._config

        self._owns_store = store is None
        if store is None:
            store = DiskCacheStore(cfg.store_path) if cfg.store_path else MemoryCacheStore()
        self._store = store

        self._owns_fetcher = fetcher is None
        self._fetcher: Fetcher = fetcher or HttpxFetcher(
            timeout=cfg.network_timeout, attempts=cfg.fetch_attempts
        )

        self._tasks = DetachedTasks()
        self._trimmer = BoundedCacheTrimmer(self._store, self._tasks)
        names = cfg.generation

        self._generation = GenerationManager(
            self._store,
            self._fetcher,
            names,
            manifest=cfg.manifest,
            clients=clients,
            persist_prefix=cfg.persist_prefix,
            skip_waiting=cfg.skip_waiting,
        )

        def can_write() -> bool:
            return not self._generation.is_redundant

        strategies = {
            RequestCategory.NAVIGATION: NetworkFirstWithFallback(
                self._store,
                self._fetcher,
                self._tasks,
                primary_cache=names.primary,
                document_url=cfg.absolute(cfg.document_url),
                offline_url=cfg.absolute(cfg.offline_url),
                can_write=can_write,
            ),
            RequestCategory.IMAGE: ImageCacheFirst(
                self._store,
                self._fetcher,
                self._tasks,
                self._trimmer,
                cache_name=names.images,
                max_entries=cfg.max_image_entries,
                fallback_icon_url=cfg.absolute(cfg.fallback_icon_url),
                can_write=can_write,
            ),
            RequestCategory.OTHER: RuntimeCacheFirst(
                self._store,
                self._fetcher,
                self._tasks,
                self._trimmer,
                cache_name=names.runtime,
                max_entries=cfg.max_runtime_entries,
                origin=cfg.origin,
                primary_cache=names.primary,
                can_write=can_write,
            ),
        }
        self._router = RequestRouter(
            strategies,
            self._fetcher,
            image_extensions=cfg.image_extensions,
            pool=RequestPool(max_workers=cfg.max_concurrency),
        )
        self._control = ControlChannel(lambda: self._generation)

    @property
    def config(self) -> ProxyConfig:
        return self._config

    @property
    def store(self) -> CacheStore:
        return self._store

    @property
    def generation(self) -> GenerationManager:
        return self._generation

    @property
    def router(self) -> RequestRouter:
        return self._router

    @property
    def trimmer(self) -> BoundedCacheTrimmer:
        return self._trimmer

    @property
    def tasks(self) -> DetachedTasks:
        return self._tasks

    # ── Lifecycle ──

    async def install(self) -> InstallReport:
        return await self._generation.install()

    async def activate(self) -> ActivationReport:
        return await self._generation.activate()

    async def post_message(self, message: ControlMessage | Mapping[str, Any] | None) -> None:
        await self._control.receive(message)

    def connect_client(self, client_id: str) -> None:
        self._generation.connect_client(client_id)

    async def release_client(self, client_id: str) -> None:
        await self._generation.release_client(client_id)

    # ── Requests ──

    async def handle(self, request: ProxyRequest) -> CachedResponse:
        return await self._router.handle(request)

    async def handle_many(self, requests: list[ProxyRequest]) -> list[CachedResponse]:
        return await self._router.handle_many(requests)

    async def fetch(
        self,
        url: str,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        mode: RequestMode | str | None = None,
        destination: str = "",
    ) -> CachedResponse:
        """Build a request for url (relative URLs resolve against the origin) and handle it."""
        request = ProxyRequest(
            method=method,
            url=self._config.absolute(url),
            headers=headers or {},
            mode=mode,
            destination=destination,
        )
        return await self.handle(request)

    # ── Teardown ──

    async def drain(self) -> None:
        """Wait for detached cache writes and trims to finish."""
        await self._tasks.drain()

    async def close(self) -> None:
        await self.drain()
        if self._owns_fetcher:
            await self._fetcher.close()
        if self._owns_store:
            await self._store.close()

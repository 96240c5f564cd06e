"""Tests for the network-first navigation strategy."""

import pytest

from offlinegate.cache.keys import request_key
from offlinegate.errors.exceptions import StoreFailure
from offlinegate.strategies.network_first import NetworkFirstWithFallback
from offlinegate.types import CachedResponse, ProxyRequest, RequestMode

ORIGIN = "https://app.example"
PRIMARY = "app-v1"


@pytest.fixture
def strategy(store, fetcher, tasks):
    return NetworkFirstWithFallback(
        store,
        fetcher,
        tasks,
        primary_cache=PRIMARY,
        document_url=f"{ORIGIN}/index.html",
        offline_url=f"{ORIGIN}/offline.html",
    )


def _nav(path: str) -> ProxyRequest:
    return ProxyRequest(url=ORIGIN + path, mode=RequestMode.NAVIGATE)


async def _seed(store, cache_name: str, path: str, body: str) -> None:
    cache = await store.open(cache_name)
    await cache.put(request_key(ORIGIN + path), CachedResponse(body=body.encode()))


class TestNetworkSuccess:
    async def test_returns_live_response(self, strategy, fetcher):
        fetcher.serve("/about", "<h1>live</h1>")
        response = await strategy.handle(_nav("/about"))
        assert response.body == b"<h1>live</h1>"

    async def test_live_response_wins_over_cache(self, strategy, fetcher, store):
        await _seed(store, PRIMARY, "/about", "stale")
        fetcher.serve("/about", "fresh")
        assert (await strategy.handle(_nav("/about"))).body == b"fresh"

    async def test_copy_stored_under_document_key(self, strategy, fetcher, store, tasks):
        fetcher.serve("/about", "<h1>about</h1>")
        await strategy.handle(_nav("/about"))
        await tasks.drain()
        cache = await store.get(PRIMARY)
        stored = await cache.match(request_key(f"{ORIGIN}/index.html"))
        assert stored.body == b"<h1>about</h1>"

    async def test_store_is_not_awaited(self, strategy, fetcher, store, tasks):
        fetcher.serve("/", "home")
        await strategy.handle(_nav("/"))
        # The write is still pending when the response comes back
        assert tasks.pending == 1
        assert await store.get(PRIMARY) is None
        await tasks.drain()
        assert await store.get(PRIMARY) is not None

    async def test_error_status_returned_but_not_stored(self, strategy, fetcher, store, tasks):
        fetcher.serve("/missing", "not here", status=404)
        response = await strategy.handle(_nav("/missing"))
        assert response.status == 404
        await tasks.drain()
        assert await store.get(PRIMARY) is None

    async def test_store_failure_swallowed(self, strategy, fetcher, store, tasks, monkeypatch):
        async def broken_open(name):
            raise StoreFailure("disk full", operation="open", cache_name=name)

        monkeypatch.setattr(store, "open", broken_open)
        fetcher.serve("/", "home")
        response = await strategy.handle(_nav("/"))
        await tasks.drain()
        assert response.body == b"home"
        assert tasks.failures == 0


class TestNetworkFailure:
    async def test_exact_match_first(self, strategy, fetcher, store):
        await _seed(store, PRIMARY, "/about", "cached about")
        await _seed(store, PRIMARY, "/offline.html", "offline")
        fetcher.offline = True
        assert (await strategy.handle(_nav("/about"))).body == b"cached about"

    async def test_exact_match_from_any_cache(self, strategy, fetcher, store):
        await _seed(store, "persist-docs", "/guide", "guide")
        fetcher.offline = True
        assert (await strategy.handle(_nav("/guide"))).body == b"guide"

    async def test_offline_page_second(self, strategy, fetcher, store):
        await _seed(store, PRIMARY, "/offline.html", "offline")
        await _seed(store, PRIMARY, "/index.html", "shell")
        fetcher.offline = True
        assert (await strategy.handle(_nav("/elsewhere"))).body == b"offline"

    async def test_primary_document_third(self, strategy, fetcher, store):
        await _seed(store, PRIMARY, "/index.html", "shell")
        fetcher.offline = True
        assert (await strategy.handle(_nav("/elsewhere"))).body == b"shell"

    async def test_synthesized_page_when_nothing_cached(self, strategy, fetcher):
        fetcher.offline = True
        response = await strategy.handle(_nav("/elsewhere"))
        assert response.status == 503
        assert not response.ok
        assert response.headers["content-type"].startswith("text/html")
        assert b"Offline" in response.body

    async def test_fragment_does_not_defeat_exact_match(self, strategy, fetcher, store):
        await _seed(store, PRIMARY, "/about", "cached about")
        fetcher.offline = True
        assert (await strategy.handle(_nav("/about#team"))).body == b"cached about"

    async def test_store_read_failure_treated_as_miss(self, strategy, fetcher, store, monkeypatch):
        async def broken_match(key):
            raise StoreFailure("locked", operation="match")

        monkeypatch.setattr(store, "match", broken_match)
        fetcher.offline = True
        response = await strategy.handle(_nav("/"))
        assert response.status == 503

import pytest

from offlinegate.cache.memory import MemoryCacheStore
from offlinegate.concurrency.detached import DetachedTasks
from offlinegate.config.schema import ProxyConfig
from offlinegate.core import OfflineGate
from offlinegate.errors.exceptions import NetworkFailure
from offlinegate.types import CachedResponse, ProxyRequest

ORIGIN = "https://app.example"


class FakeFetcher:
    """Scripted network: URLs without a route are unreachable."""

    def __init__(self) -> None:
        self.routes: dict[str, CachedResponse] = {}
        self.calls: list[ProxyRequest] = []
        self.offline = False
        self.closed = False

    def serve(self, url: str, body: bytes | str = b"", status: int = 200, headers=None) -> None:
        if isinstance(body, str):
            body = body.encode()
        url = url if url.startswith("http") else ORIGIN + url
        self.routes[url] = CachedResponse(
            status=status, body=body, headers=headers or {}, url=url
        )

    def drop(self, url: str) -> None:
        url = url if url.startswith("http") else ORIGIN + url
        self.routes.pop(url, None)

    def calls_for(self, url: str) -> int:
        url = url if url.startswith("http") else ORIGIN + url
        return sum(1 for r in self.calls if r.url == url)

    async def fetch(self, request: ProxyRequest) -> CachedResponse:
        self.calls.append(request)
        if self.offline:
            raise NetworkFailure("offline", url=request.url)
        response = self.routes.get(request.url)
        if response is None:
            raise NetworkFailure("unreachable", url=request.url)
        return response.clone()

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def store():
    return MemoryCacheStore()


@pytest.fixture
def tasks():
    return DetachedTasks()


@pytest.fixture
def config():
    return ProxyConfig(
        origin=ORIGIN,
        cache_prefix="app",
        version="v1",
        precache=["/", "/index.html", "/offline.html", "/apple-touch-icon-180.png"],
    )


@pytest.fixture
def make_gate(store, fetcher):
    """Build an OfflineGate over the shared fake network and memory store."""

    def _make(config: ProxyConfig, **kwargs) -> OfflineGate:
        kwargs.setdefault("store", store)
        kwargs.setdefault("fetcher", fetcher)
        return OfflineGate(config, **kwargs)

    return _make


@pytest.fixture
def sample_proxy_yaml(tmp_path):
    """Write a minimal proxy YAML and return its path."""
    content = """
proxy:
  origin: https://app.example
  cache_prefix: keypad
  version: v3
  precache:
    - /
    - /index.html
    - /offline.html
  max_image_entries: 10
"""
    path = tmp_path / "offlinegate.yaml"
    path.write_text(content)
    return path

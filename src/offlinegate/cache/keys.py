"""Cache keys and cache naming — request identity and generation names."""

from __future__ import annotations

from urllib.parse import urldefrag, urljoin, urlsplit

from pydantic import BaseModel

from offlinegate.types import ProxyRequest, RequestKey

PERSIST_PREFIX = "persist-"


def resolve_url(base: str, url: str) -> str:
    """Resolve a (possibly relative) URL against base and drop any fragment."""
    absolute = urljoin(base, url) if base else url
    return urldefrag(absolute).url


def request_key(request: ProxyRequest | str, base: str = "") -> RequestKey:
    """Canonical key for a request or a bare URL (bare URLs are GETs)."""
    if isinstance(request, str):
        return RequestKey(method="GET", url=resolve_url(base, request))
    return RequestKey(method=request.method.upper(), url=resolve_url(base, request.url))


def url_origin(url: str) -> str | None:
    """scheme://host[:port] of an absolute URL, or None if it has none."""
    try:
        parts = urlsplit(url)
        # Accessing .port validates it; a bad port raises ValueError
        parts.port
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None
    return f"{parts.scheme.lower()}://{parts.netloc.lower()}"


def is_persisted(cache_name: str, prefix: str = PERSIST_PREFIX) -> bool:
    return cache_name.startswith(prefix)


class GenerationNames(BaseModel):
    """Names of the caches owned by one versioned generation."""

    prefix: str
    version: str

    @property
    def primary(self) -> str:
        return f"{self.prefix}-{self.version}"

    @property
    def runtime(self) -> str:
        return f"{self.prefix}-runtime-{self.version}"

    @property
    def images(self) -> str:
        return f"{self.prefix}-images-{self.version}"

    @property
    def all(self) -> tuple[str, str, str]:
        return (self.primary, self.runtime, self.images)

    def owns(self, cache_name: str) -> bool:
        return cache_name in self.all

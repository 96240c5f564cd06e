"""Pydantic model for proxy configuration."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from offlinegate.cache.keys import GenerationNames, resolve_url, url_origin
from offlinegate.config import defaults


class ProxyConfig(BaseModel):
    """Everything one proxy instance needs to know about its application."""

    origin: str = defaults.DEFAULT_ORIGIN
    cache_prefix: str = defaults.DEFAULT_CACHE_PREFIX
    version: str = defaults.DEFAULT_VERSION
    persist_prefix: str = defaults.DEFAULT_PERSIST_PREFIX
    skip_waiting: bool = defaults.DEFAULT_SKIP_WAITING

    # Asset manifest installed into the primary cache
    precache: list[str] = Field(default_factory=list)

    document_url: str = defaults.DEFAULT_DOCUMENT_URL
    offline_url: str = defaults.DEFAULT_OFFLINE_URL
    fallback_icon_url: str = defaults.DEFAULT_FALLBACK_ICON_URL

    max_image_entries: int = Field(default=defaults.DEFAULT_MAX_IMAGE_ENTRIES, ge=0)
    max_runtime_entries: int = Field(default=defaults.DEFAULT_MAX_RUNTIME_ENTRIES, ge=0)
    image_extensions: list[str] = Field(
        default_factory=lambda: list(defaults.DEFAULT_IMAGE_EXTENSIONS)
    )

    fetch_attempts: int = Field(default=defaults.DEFAULT_FETCH_ATTEMPTS, ge=1)
    network_timeout: float = Field(default=defaults.DEFAULT_NETWORK_TIMEOUT, gt=0)
    max_concurrency: int = Field(default=defaults.DEFAULT_MAX_CONCURRENCY, ge=1)

    store_path: Path | None = None
    log_level: str = defaults.DEFAULT_LOG_LEVEL

    @field_validator("origin")
    @classmethod
    def _origin_is_absolute(cls, value: str) -> str:
        origin = url_origin(value)
        if origin is None:
            raise ValueError(f"origin must be an absolute URL, got {value!r}")
        return origin

    @field_validator("image_extensions")
    @classmethod
    def _normalise_extensions(cls, value: list[str]) -> list[str]:
        return [ext.lower().lstrip(".") for ext in value if ext]

    @property
    def generation(self) -> GenerationNames:
        return GenerationNames(prefix=self.cache_prefix, version=self.version)

    def absolute(self, url: str) -> str:
        """Resolve a configured URL against the origin."""
        return resolve_url(self.origin + "/", url)

    @property
    def manifest(self) -> list[str]:
        return [self.absolute(url) for url in self.precache]

"""Package-level default configuration values."""

from __future__ import annotations

from typing import Any

# Default generation settings
DEFAULT_ORIGIN = "http://localhost:8000"
DEFAULT_CACHE_PREFIX = "app"
DEFAULT_VERSION = "v1"
DEFAULT_PERSIST_PREFIX = "persist-"
DEFAULT_SKIP_WAITING = False

# Well-known documents
DEFAULT_DOCUMENT_URL = "/index.html"
DEFAULT_OFFLINE_URL = "/offline.html"
DEFAULT_FALLBACK_ICON_URL = "/apple-touch-icon-180.png"

# Default trim limits
DEFAULT_MAX_IMAGE_ENTRIES = 60
DEFAULT_MAX_RUNTIME_ENTRIES = 200

DEFAULT_IMAGE_EXTENSIONS = ("png", "jpg", "jpeg", "gif", "webp", "svg", "ico")

# Default network settings
DEFAULT_FETCH_ATTEMPTS = 1
DEFAULT_NETWORK_TIMEOUT = 10.0
DEFAULT_MAX_CONCURRENCY = 10

# Log level
DEFAULT_LOG_LEVEL = "WARNING"


def get_defaults() -> dict[str, Any]:
    """Return all defaults as a flat dictionary for merging."""
    return {
        "origin": DEFAULT_ORIGIN,
        "cache_prefix": DEFAULT_CACHE_PREFIX,
        "version": DEFAULT_VERSION,
        "persist_prefix": DEFAULT_PERSIST_PREFIX,
        "skip_waiting": DEFAULT_SKIP_WAITING,
        "precache": [],
        "document_url": DEFAULT_DOCUMENT_URL,
        "offline_url": DEFAULT_OFFLINE_URL,
        "fallback_icon_url": DEFAULT_FALLBACK_ICON_URL,
        "max_image_entries": DEFAULT_MAX_IMAGE_ENTRIES,
        "max_runtime_entries": DEFAULT_MAX_RUNTIME_ENTRIES,
        "image_extensions": list(DEFAULT_IMAGE_EXTENSIONS),
        "fetch_attempts": DEFAULT_FETCH_ATTEMPTS,
        "network_timeout": DEFAULT_NETWORK_TIMEOUT,
        "max_concurrency": DEFAULT_MAX_CONCURRENCY,
        "log_level": DEFAULT_LOG_LEVEL,
    }

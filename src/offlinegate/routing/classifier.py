"""Request classification — decide which strategy handles a request."""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urlsplit

from offlinegate.config.defaults import DEFAULT_IMAGE_EXTENSIONS
from offlinegate.types import ProxyRequest, RequestCategory, RequestMode


def classify(
    request: ProxyRequest,
    image_extensions: Iterable[str] = DEFAULT_IMAGE_EXTENSIONS,
) -> RequestCategory:
    """Map a request to its category. Non-GET requests bypass every strategy."""
    if not request.is_get:
        return RequestCategory.BYPASS
    if is_navigation_request(request):
        return RequestCategory.NAVIGATION
    if is_image_request(request, image_extensions):
        return RequestCategory.IMAGE
    return RequestCategory.OTHER


def is_navigation_request(request: ProxyRequest) -> bool:
    if request.mode == RequestMode.NAVIGATE:
        return True
    return "text/html" in request.header("accept")


def is_image_request(
    request: ProxyRequest,
    image_extensions: Iterable[str] = DEFAULT_IMAGE_EXTENSIONS,
) -> bool:
    if request.destination == "image":
        return True
    path = _url_path(request.url)
    if not path:
        return False
    suffixes = tuple(f".{ext.lower()}" for ext in image_extensions)
    return bool(suffixes) and path.lower().endswith(suffixes)


def _url_path(url: str) -> str | None:
    """Path of an absolute URL; None when the URL is malformed or relative."""
    try:
        parts = urlsplit(url)
        parts.port
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None
    return parts.path

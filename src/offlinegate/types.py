"""Shared Pydantic models for offlinegate."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

# ── Enums ──


class RequestCategory(StrEnum):
    NAVIGATION = "navigation"
    IMAGE = "image"
    OTHER = "other"
    BYPASS = "bypass"


class RequestMode(StrEnum):
    NAVIGATE = "navigate"
    SAME_ORIGIN = "same-origin"
    NO_CORS = "no-cors"
    CORS = "cors"


class ResponseType(StrEnum):
    BASIC = "basic"
    ERROR = "error"


class LifecycleState(StrEnum):
    NEW = "new"
    INSTALLING = "installing"
    INSTALLED = "installed"
    ACTIVATING = "activating"
    ACTIVATED = "activated"
    REDUNDANT = "redundant"


# ── Request / response models ──


class RequestKey(BaseModel):
    """Identity of a cached entry: method plus absolute URL."""

    model_config = ConfigDict(frozen=True)

    method: str
    url: str

    def __str__(self) -> str:
        return f"{self.method} {self.url}"


class ProxyRequest(BaseModel):
    """An intercepted outgoing request."""

    method: str = "GET"
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    mode: RequestMode | None = None
    destination: str = ""

    def header(self, name: str) -> str:
        """Case-insensitive header lookup; missing headers read as ''."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return ""

    @property
    def is_get(self) -> bool:
        return self.method.upper() == "GET"


class CachedResponse(BaseModel):
    """Response payload as seen by the client and as stored in a cache."""

    status: int = 200
    status_text: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    body: bytes = b""
    url: str = ""
    type: ResponseType = ResponseType.BASIC

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def is_error(self) -> bool:
        return self.type == ResponseType.ERROR

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def clone(self) -> CachedResponse:
        return self.model_copy(deep=True)

    @classmethod
    def error(cls) -> CachedResponse:
        """The network-error result: no status, no body."""
        return cls(status=0, type=ResponseType.ERROR)


# ── Lifecycle reports ──


class InstallReport(BaseModel):
    cache_name: str
    cached: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
    bulk: bool = True

    @property
    def complete(self) -> bool:
        return not self.failed


class ActivationReport(BaseModel):
    deleted: list[str] = Field(default_factory=list)
    clients_claimed: int = 0


class ControlMessage(BaseModel):
    type: str

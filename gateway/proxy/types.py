"""Per-request data models for the proxy engine."""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field

import httpx

from gateway.config.routes import RouteRule

Body = bytes | AsyncIterator[bytes]


@dataclass(frozen=True)
class InboundRequest:
    """Read-only view of the request received from the edge."""

    method: str
    hostname: str
    path: str
    query: str = ""  # Raw query string, without the leading "?"
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: Body | None = None
    request_id: str | None = None

    @property
    def has_body(self) -> bool:
        return self.method.upper() not in ("GET", "HEAD") and self.body is not None


@dataclass(frozen=True)
class RouteTarget:
    """Result of routing: the matched rule and the absolute origin URL."""

    rule: RouteRule
    url: str
    passthrough: bool


@dataclass
class OriginResult:
    """The origin response chosen for the client, plus challenge bookkeeping."""

    response: httpx.Response
    url: str
    challenged: bool = False
    retried: bool = False


@dataclass
class FinalResponse:
    """Response handed to the serving layer.

    ``headers`` is an ordered list so repeated headers (Set-Cookie) keep their
    multiplicity.
    """

    status_code: int
    headers: list[tuple[str, str]]
    body: Body = b""
    close: Callable[[], Awaitable[None]] | None = None  # Releases the origin response

    def get_all(self, name: str) -> list[str]:
        name = name.lower()
        return [v for k, v in self.headers if k.lower() == name]

    def get(self, name: str) -> str | None:
        values = self.get_all(name)
        return values[0] if values else None


@dataclass
class LogRecord:
    """One structured record per handled request."""

    method: str
    path: str
    target_url: str | None
    status: int
    duration_ms: float
    cookie_count: int = 0
    challenged: bool = False

    def as_extra(self) -> dict[str, object]:
        return {
            "method": self.method,
            "path": self.path,
            "target_url": self.target_url,
            "status": self.status,
            "duration_ms": self.duration_ms,
            "cookie_count": self.cookie_count,
            "challenged": self.challenged,
        }

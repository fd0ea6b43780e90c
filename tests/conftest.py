"""Shared test fixtures for the gateway test suite."""

from __future__ import annotations

import os
from collections.abc import Callable

import httpx
import pytest

from gateway.config.routes import DEFAULT_ROUTE_RULES, RouteRule
from gateway.config.settings import GatewaySettings, ProxyConfig, ProxyMode
from gateway.proxy.types import InboundRequest

TARGET_DOMAIN = "v2.a11yplan.de"


# ---------------------------------------------------------------------------
# Keep the environment from leaking into settings
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _clear_gateway_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove GATEWAY_* variables so every test starts from the defaults."""
    for key in list(os.environ):
        if key.startswith("GATEWAY_"):
            monkeypatch.delenv(key, raising=False)


# ---------------------------------------------------------------------------
# Configuration fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> GatewaySettings:
    """Test settings with safe defaults."""
    return GatewaySettings(target_domain=TARGET_DOMAIN, log_level="DEBUG")


@pytest.fixture
def config() -> ProxyConfig:
    return ProxyConfig(target_domain=TARGET_DOMAIN)


@pytest.fixture
def rules() -> tuple[RouteRule, ...]:
    return DEFAULT_ROUTE_RULES


@pytest.fixture
def check_rule() -> RouteRule:
    return DEFAULT_ROUTE_RULES[0]


# ---------------------------------------------------------------------------
# Request / origin helpers
# ---------------------------------------------------------------------------

def _make_inbound(
    path: str = "/",
    *,
    hostname: str = "check.a11yplan.de",
    method: str = "GET",
    query: str = "",
    headers: dict[str, str] | list[tuple[str, str]] | None = None,
    body: bytes | None = None,
) -> InboundRequest:
    """Build an InboundRequest with sensible defaults."""
    return InboundRequest(
        method=method,
        hostname=hostname,
        path=path,
        query=query,
        headers=httpx.Headers(headers or {}),
        body=body,
        request_id="test-request-id",
    )


class RecordingOrigin:
    """httpx.MockTransport handler that records requests and replays responses.

    ``responses`` is consumed in order; the last one is repeated when the
    list runs out. Each call gets a fresh streaming copy so a response can
    be served more than once and read with ``aiter_raw``.
    """

    def __init__(self, *responses: httpx.Response | Callable[[httpx.Request], httpx.Response]) -> None:
        self._responses = list(responses) or [httpx.Response(200, content=b"OK")]
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests) - 1, len(self._responses) - 1)
        response = self._responses[index]
        if not isinstance(response, httpx.Response):
            return response(request)
        # An unread stream, like a real transport returns.
        return httpx.Response(
            response.status_code,
            headers=response.headers.multi_items(),
            stream=httpx.ByteStream(response.content),
        )

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def make_config() -> Callable[..., ProxyConfig]:
    def _make(**overrides: object) -> ProxyConfig:
        values: dict = {"target_domain": TARGET_DOMAIN, "mode": ProxyMode.CHALLENGE}
        values.update(overrides)
        return ProxyConfig(**values)

    return _make


@pytest.fixture
def make_inbound() -> Callable[..., InboundRequest]:
    return _make_inbound


@pytest.fixture
def origin() -> Callable[..., RecordingOrigin]:
    """Factory for a recording origin: ``origin(response, ...)``."""
    return RecordingOrigin

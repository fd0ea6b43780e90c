"""Client-facing response assembly.

Copies the chosen origin response, strips origin-internal headers, re-scopes
every Set-Cookie to the public domain and adds the optional CORS and cache
headers. The body stays a stream of raw origin bytes.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx

from gateway.config.settings import ProxyConfig
from gateway.proxy.cookies import rescope_set_cookie
from gateway.proxy.fingerprint import (
    CACHE_HINT,
    CORS_HEADERS,
    HOP_BY_HOP_HEADERS,
    STRIPPED_RESPONSE_HEADERS,
)
from gateway.proxy.types import FinalResponse, InboundRequest, OriginResult


async def stream_body(response: httpx.Response) -> AsyncIterator[bytes]:
    """Yield the undecoded origin body and release the connection afterwards."""
    try:
        async for chunk in response.aiter_raw():
            yield chunk
    finally:
        await response.aclose()


def _set_header(headers: list[tuple[str, str]], name: str, value: str) -> list[tuple[str, str]]:
    lowered = name.lower()
    kept = [(k, v) for k, v in headers if k.lower() != lowered]
    kept.append((name, value))
    return kept


def rewrite_response_headers(
    origin_headers: httpx.Headers,
    inbound: InboundRequest,
    status_code: int,
    config: ProxyConfig,
) -> list[tuple[str, str]]:
    """Return the client-facing header list for an origin response."""
    headers: list[tuple[str, str]] = []
    for name, value in origin_headers.multi_items():
        lowered = name.lower()
        if lowered in STRIPPED_RESPONSE_HEADERS or lowered in HOP_BY_HOP_HEADERS:
            continue
        if lowered == "set-cookie":
            value = rescope_set_cookie(value, inbound.hostname)
        headers.append((name, value))

    if config.enable_cors:
        for name, value in CORS_HEADERS.items():
            headers = _set_header(headers, name, value)

    if config.enable_cache_hint and status_code == 200 and inbound.method.upper() == "GET":
        headers = _set_header(headers, "Cache-Control", CACHE_HINT)

    return headers


def build_response(
    result: OriginResult,
    inbound: InboundRequest,
    config: ProxyConfig,
) -> FinalResponse:
    """Assemble the FinalResponse for the origin response in *result*."""
    response = result.response
    return FinalResponse(
        status_code=response.status_code,
        headers=rewrite_response_headers(response.headers, inbound, response.status_code, config),
        body=stream_body(response),
        close=response.aclose,
    )


def build_redirect(target_url: str, config: ProxyConfig) -> FinalResponse:
    """Redirect-only mode: send the client straight to the origin URL."""
    status = 301 if config.use_permanent_redirect else 302
    return FinalResponse(status_code=status, headers=[("location", target_url)])

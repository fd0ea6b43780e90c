"""Outbound request header construction.

Builds the header set sent to the origin from an allow-list of inbound
headers plus a synthesized browser fingerprint, so the origin's bot
protection sees a plausible browser request. No I/O.
"""

from __future__ import annotations

import httpx

from gateway.config.settings import ProxyConfig
from gateway.proxy.fingerprint import (
    BYPASS_TOKEN_HEADER,
    DEFAULT_ACCEPT_ENCODING,
    DEFAULT_ACCEPT_LANGUAGE,
    DEFAULT_CLIENT_HINTS,
    DEFAULT_USER_AGENT,
    DOCUMENT_PROFILE,
    FORWARDED_REQUEST_HEADERS,
    profile_for_path,
)
from gateway.proxy.types import InboundRequest, RouteTarget


def client_ip(inbound: InboundRequest, config: ProxyConfig) -> str | None:
    """Read the real client IP from the trusted edge header, if present."""
    value = inbound.headers.get(config.client_ip_header, "").strip()
    return value or None


def build_outbound_headers(
    inbound: InboundRequest,
    target: RouteTarget,
    config: ProxyConfig,
) -> httpx.Headers:
    """Return a fresh header multimap for the origin call."""
    headers = httpx.Headers([
        (name, value)
        for name, value in inbound.headers.multi_items()
        if name.lower() in FORWARDED_REQUEST_HEADERS
    ])

    headers["Host"] = config.origin_host

    if not headers.get("user-agent", "").strip():
        headers["User-Agent"] = DEFAULT_USER_AGENT
        headers.update(DEFAULT_CLIENT_HINTS)

    profile = profile_for_path(inbound.path)
    if profile is DOCUMENT_PROFILE:
        headers["Accept"] = headers.get("accept") or profile.accept
    else:
        headers["Accept"] = profile.accept
    headers["Accept-Language"] = headers.get("accept-language") or DEFAULT_ACCEPT_LANGUAGE
    headers["Accept-Encoding"] = headers.get("accept-encoding") or DEFAULT_ACCEPT_ENCODING

    headers["Sec-Fetch-Dest"] = profile.sec_fetch_dest
    is_asset = target.rule.is_asset_path(inbound.path)
    headers["Sec-Fetch-Mode"] = "cors" if is_asset else "navigate"
    headers["Sec-Fetch-Site"] = "same-origin"
    if profile is DOCUMENT_PROFILE and not is_asset:
        headers["Sec-Fetch-User"] = "?1"
        headers["Upgrade-Insecure-Requests"] = "1"

    ip = client_ip(inbound, config)
    if ip:
        headers["X-Forwarded-For"] = ip
        headers["X-Real-IP"] = ip.split(",")[0].strip()
    headers["X-Forwarded-Proto"] = "https"
    headers["X-Forwarded-Host"] = inbound.hostname

    if config.bypass_token:
        headers[BYPASS_TOKEN_HEADER] = config.bypass_token

    return headers

"""Hostname/path routing onto the origin.

Pure functions: no I/O, no state. The same inputs always produce the same
target URL.
"""

from __future__ import annotations

from collections.abc import Iterable

from gateway.config.routes import RouteRule
from gateway.config.settings import ProxyConfig
from gateway.middleware.error_handler import InvalidDomainError
from gateway.proxy.types import RouteTarget


def classify(hostname: str, rules: Iterable[RouteRule]) -> RouteRule | None:
    """Return the rule owning *hostname*, or ``None`` when unrecognized.

    Exact hostname matches win over the leading-label fallback.
    """
    rules = tuple(rules)
    host = hostname.lower().rstrip(".")
    for rule in rules:
        if host in rule.hostnames:
            return rule
    for rule in rules:
        if rule.matches_host(host):
            return rule
    return None


def route(
    hostname: str,
    path: str,
    query: str,
    config: ProxyConfig,
    rules: Iterable[RouteRule],
) -> RouteTarget:
    """Compute the origin URL for an inbound request.

    Raises:
        InvalidDomainError: if no rule recognizes *hostname*.
    """
    rule = classify(hostname, rules)
    if rule is None:
        raise InvalidDomainError(hostname=hostname)

    path = path or "/"
    search = f"?{query}" if query else ""

    if rule.is_passthrough_path(path):
        return RouteTarget(
            rule=rule,
            url=f"{config.origin_base_url}{path}{search}",
            passthrough=True,
        )

    sub_path = "" if path == "/" else path
    return RouteTarget(
        rule=rule,
        url=f"{config.origin_base_url}{rule.target_path_prefix}{sub_path}{search}",
        passthrough=False,
    )

"""Property tests for hostname/path routing.

Validates that routed URLs always keep the inbound path and query verbatim
under the site prefix, and that unrecognized hostnames never route.
"""

from __future__ import annotations

import pytest
from hypothesis import assume, given, settings, strategies as st

from gateway.config.routes import DEFAULT_ROUTE_RULES
from gateway.config.settings import ProxyConfig
from gateway.middleware.error_handler import InvalidDomainError
from gateway.proxy.router import classify, route

_CONFIG = ProxyConfig(target_domain="v2.a11yplan.de")
_BASE = "https://v2.a11yplan.de"


# --- Strategies ---

segments = st.text(min_size=1, max_size=12, alphabet="abcdefghijklmnopqrstuvwxyz0123456789-_.~%")
paths = st.lists(segments, min_size=1, max_size=5).map(lambda parts: "/" + "/".join(parts))
queries = st.one_of(
    st.just(""),
    st.text(min_size=1, max_size=40, alphabet="abcdefghijklmnopqrstuvwxyz0123456789=&%+-_."),
)
site_hosts = st.sampled_from([
    ("check.a11yplan.de", "/public/check"),
    ("share.v2.a11yplan.de", "/public/share"),
])
labels = st.from_regex(r"[a-z][a-z0-9]{0,9}", fullmatch=True)
foreign_hosts = st.lists(labels, min_size=2, max_size=4).map(".".join)


@settings(max_examples=200)
@given(host_and_prefix=site_hosts, path=paths, query=queries)
def test_routed_url_preserves_path_and_query(
    host_and_prefix: tuple[str, str],
    path: str,
    query: str,
) -> None:
    hostname, prefix = host_and_prefix
    rule = classify(hostname, DEFAULT_ROUTE_RULES)
    assume(not rule.is_passthrough_path(path))

    target = route(hostname, path, query, _CONFIG, DEFAULT_ROUTE_RULES)

    expected = f"{_BASE}{prefix}{path}" + (f"?{query}" if query else "")
    assert target.url == expected
    assert target.passthrough is False


@settings(max_examples=100)
@given(
    root=st.sampled_from(["/_nuxt/", "/_ipx/", "/_locales/", "/api/"]),
    rest=segments,
    query=queries,
)
def test_passthrough_roots_are_never_prefixed(root: str, rest: str, query: str) -> None:
    path = root + rest
    target = route("check.a11yplan.de", path, query, _CONFIG, DEFAULT_ROUTE_RULES)

    assert target.url == f"{_BASE}{path}" + (f"?{query}" if query else "")
    assert "/public/" not in target.url
    assert target.passthrough is True


@settings(max_examples=200)
@given(hostname=foreign_hosts, path=paths)
def test_unrecognized_hosts_never_route(hostname: str, path: str) -> None:
    assume(not hostname.startswith(("check.", "share.")))

    assert classify(hostname, DEFAULT_ROUTE_RULES) is None
    with pytest.raises(InvalidDomainError):
        route(hostname, path, "", _CONFIG, DEFAULT_ROUTE_RULES)


@settings(max_examples=100)
@given(rest=foreign_hosts, label=st.sampled_from(["check", "share"]))
def test_leading_label_selects_site(rest: str, label: str) -> None:
    rule = classify(f"{label}.{rest}", DEFAULT_ROUTE_RULES)

    assert rule is not None
    assert rule.name == f"{label}-site"


@settings(max_examples=100)
@given(host_and_prefix=site_hosts, path=paths, query=queries)
def test_routing_is_deterministic(host_and_prefix: tuple[str, str], path: str, query: str) -> None:
    hostname, _ = host_and_prefix
    first = route(hostname, path, query, _CONFIG, DEFAULT_ROUTE_RULES)
    second = route(hostname.upper(), path, query, _CONFIG, DEFAULT_ROUTE_RULES)

    assert first.url == second.url

"""Unit tests for hostname/path routing."""

from __future__ import annotations

import pytest

from gateway.config.settings import ProxyConfig
from gateway.middleware.error_handler import InvalidDomainError
from gateway.proxy.router import classify, route


class TestClassify:
    def test_exact_check_hostname(self, rules) -> None:
        assert classify("check.a11yplan.de", rules).name == "check-site"

    def test_exact_share_hostname(self, rules) -> None:
        assert classify("share.v2.a11yplan.de", rules).name == "share-site"

    def test_leading_label_fallback(self, rules) -> None:
        assert classify("check.staging.example.org", rules).name == "check-site"
        assert classify("share.example.com", rules).name == "share-site"

    def test_case_insensitive(self, rules) -> None:
        assert classify("CHECK.A11YPLAN.DE", rules).name == "check-site"

    def test_trailing_dot_is_ignored(self, rules) -> None:
        assert classify("check.a11yplan.de.", rules).name == "check-site"

    @pytest.mark.parametrize(
        "hostname",
        [
            "unknown.domain.com",
            "notcheck.example.com",
            "myshare.example.com",
            "a11yplan.de",
            "",
        ],
    )
    def test_unrecognized(self, rules, hostname: str) -> None:
        assert classify(hostname, rules) is None


class TestRoute:
    def test_root_path_collapses(self, config, rules) -> None:
        target = route("check.a11yplan.de", "/", "", config, rules)
        assert target.url == "https://v2.a11yplan.de/public/check"
        assert target.passthrough is False

    def test_sub_path_and_query_preserved(self, config, rules) -> None:
        target = route("check.a11yplan.de", "/some/path", "x=1", config, rules)
        assert target.url == "https://v2.a11yplan.de/public/check/some/path?x=1"

    def test_query_string_verbatim(self, config, rules) -> None:
        target = route("check.a11yplan.de", "/test", "foo=bar&baz=qux", config, rules)
        assert target.url == "https://v2.a11yplan.de/public/check/test?foo=bar&baz=qux"

    def test_share_id(self, config, rules) -> None:
        target = route("share.v2.a11yplan.de", "/ID123", "", config, rules)
        assert target.url == "https://v2.a11yplan.de/public/share/ID123"

    def test_share_nested(self, config, rules) -> None:
        target = route("share.v2.a11yplan.de", "/ID123/nested/path", "", config, rules)
        assert target.url == "https://v2.a11yplan.de/public/share/ID123/nested/path"

    def test_root_with_query(self, config, rules) -> None:
        target = route("share.v2.a11yplan.de", "/", "lang=de", config, rules)
        assert target.url == "https://v2.a11yplan.de/public/share?lang=de"

    @pytest.mark.parametrize(
        "path",
        [
            "/_nuxt/entry.abc123.js",
            "/_ipx/w_640/logo.png",
            "/_locales/de.json",
            "/api/reports/42",
            "/favicon.ico",
        ],
    )
    def test_passthrough_paths_stay_origin_rooted(self, config, rules, path: str) -> None:
        target = route("check.a11yplan.de", path, "v=2", config, rules)
        assert target.url == f"https://v2.a11yplan.de{path}?v=2"
        assert target.passthrough is True

    def test_exact_passthrough_entry_is_not_a_prefix(self, config, rules) -> None:
        target = route("check.a11yplan.de", "/favicon.ico.html", "", config, rules)
        assert target.url == "https://v2.a11yplan.de/public/check/favicon.ico.html"

    def test_api_without_trailing_slash_is_prefixed(self, config, rules) -> None:
        target = route("check.a11yplan.de", "/apiary", "", config, rules)
        assert target.url == "https://v2.a11yplan.de/public/check/apiary"

    def test_unknown_host_raises(self, config, rules) -> None:
        with pytest.raises(InvalidDomainError) as exc_info:
            route("unknown.domain.com", "/test", "", config, rules)
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Invalid domain configuration"

    def test_scheme_in_target_domain_is_stripped(self, rules) -> None:
        config = ProxyConfig(target_domain="https://v2.a11yplan.de/")
        target = route("check.a11yplan.de", "/x", "", config, rules)
        assert target.url == "https://v2.a11yplan.de/public/check/x"

    def test_is_deterministic(self, config, rules) -> None:
        first = route("check.a11yplan.de", "/a/b", "q=1", config, rules)
        second = route("check.a11yplan.de", "/a/b", "q=1", config, rules)
        assert first == second

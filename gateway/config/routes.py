"""Route rule models and YAML loader.

Provides the typed Pydantic model for one public-hostname route, the built-in
route table, and a loader that parses the YAML route table into those models.
Rules are validated as a set: no two rules may claim the same hostname.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from gateway.middleware.error_handler import RouteConfigError

logger = logging.getLogger(__name__)

DEFAULT_ASSET_PREFIXES: tuple[str, ...] = ("/_nuxt/", "/_ipx/", "/_locales/")
DEFAULT_PASSTHROUGH_PREFIXES: tuple[str, ...] = ("/api/", "/favicon.ico")


def _path_matches(path: str, prefix: str) -> bool:
    """Directory-style prefixes (trailing ``/``) match by prefix, others exactly."""
    if prefix.endswith("/"):
        return path.startswith(prefix)
    return path == prefix


class RouteRule(BaseModel):
    """Maps a family of public hostnames onto a path prefix of the origin."""

    model_config = {"frozen": True}

    name: str = Field(min_length=1)
    hostnames: tuple[str, ...] = ()
    host_prefix: str | None = None
    target_path_prefix: str
    asset_prefixes: tuple[str, ...] = DEFAULT_ASSET_PREFIXES
    passthrough_prefixes: tuple[str, ...] = DEFAULT_PASSTHROUGH_PREFIXES

    @field_validator("hostnames", mode="before")
    @classmethod
    def _lower_hostnames(cls, value: object) -> object:
        if isinstance(value, (list, tuple)):
            return tuple(str(h).strip().lower() for h in value)
        return value

    @field_validator("host_prefix")
    @classmethod
    def _lower_prefix(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().lower()
        return value or None

    @field_validator("target_path_prefix")
    @classmethod
    def _normalize_target_prefix(cls, value: str) -> str:
        value = "/" + value.strip().strip("/")
        return "" if value == "/" else value

    def matches_host(self, hostname: str) -> bool:
        """Exact hostname match, or the single fallback rule: leading label."""
        hostname = hostname.lower()
        if hostname in self.hostnames:
            return True
        return self.host_prefix is not None and hostname.startswith(self.host_prefix)

    def is_asset_path(self, path: str) -> bool:
        return any(_path_matches(path, p) for p in self.asset_prefixes)

    def is_passthrough_path(self, path: str) -> bool:
        """True for origin-rooted paths that must not get the site prefix."""
        return self.is_asset_path(path) or any(
            _path_matches(path, p) for p in self.passthrough_prefixes
        )


DEFAULT_ROUTE_RULES: tuple[RouteRule, ...] = (
    RouteRule(
        name="check-site",
        hostnames=("check.a11yplan.de",),
        host_prefix="check.",
        target_path_prefix="/public/check",
    ),
    RouteRule(
        name="share-site",
        hostnames=("share.v2.a11yplan.de",),
        host_prefix="share.",
        target_path_prefix="/public/share",
    ),
)


def validate_route_rules(rules: tuple[RouteRule, ...]) -> tuple[RouteRule, ...]:
    """Reject route tables in which one hostname could match two rules.

    Raises:
        RouteConfigError: on duplicate names, duplicate exact hostnames,
            nested host prefixes, or an exact hostname claimed by another
            rule's prefix.
    """
    names = [rule.name for rule in rules]
    if len(names) != len(set(names)):
        raise RouteConfigError(f"Duplicate route names in {names}")

    for i, rule in enumerate(rules):
        for other in rules[i + 1:]:
            shared = set(rule.hostnames) & set(other.hostnames)
            if shared:
                raise RouteConfigError(
                    f"Routes '{rule.name}' and '{other.name}' share hostnames {sorted(shared)}"
                )
            if rule.host_prefix and other.host_prefix and (
                rule.host_prefix.startswith(other.host_prefix)
                or other.host_prefix.startswith(rule.host_prefix)
            ):
                raise RouteConfigError(
                    f"Host prefixes of '{rule.name}' and '{other.name}' overlap"
                )
            for a, b in ((rule, other), (other, rule)):
                claimed = [h for h in a.hostnames if b.matches_host(h)]
                if claimed:
                    raise RouteConfigError(
                        f"Hostnames {claimed} of '{a.name}' also match route '{b.name}'"
                    )
    return rules


def load_route_rules(yaml_path: str) -> tuple[RouteRule, ...]:
    """Parse a route table YAML file into validated RouteRule objects.

    Args:
        yaml_path: Path to the YAML route table.

    Returns:
        The ordered route rules. If the file is missing, unparsable or holds
        no valid rule, the built-in check/share table is returned.

    Raises:
        RouteConfigError: if the parsed rules overlap.
    """
    path = Path(yaml_path)

    if not path.exists():
        logger.warning("Route table not found at %s — using built-in routes", yaml_path)
        return DEFAULT_ROUTE_RULES

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        logger.error("Failed to parse route table YAML at %s: %s", yaml_path, exc)
        return DEFAULT_ROUTE_RULES

    if not isinstance(raw, dict) or not isinstance(raw.get("routes"), list):
        logger.warning("Route table YAML missing 'routes' list — using built-in routes")
        return DEFAULT_ROUTE_RULES

    rules: list[RouteRule] = []
    for index, entry in enumerate(raw["routes"]):
        try:
            rules.append(RouteRule.model_validate(entry))
        except Exception as exc:
            logger.error("Invalid route #%d: %s — skipping", index, exc)

    if not rules:
        logger.warning("Route table at %s has no valid routes — using built-in routes", yaml_path)
        return DEFAULT_ROUTE_RULES

    logger.info("Loaded %d routes from %s", len(rules), yaml_path)
    return validate_route_rules(tuple(rules))

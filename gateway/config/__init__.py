"""Configuration module — settings and route table."""

from gateway.config.routes import DEFAULT_ROUTE_RULES, RouteRule, load_route_rules
from gateway.config.settings import GatewaySettings, ProxyConfig, ProxyMode

__all__ = [
    "DEFAULT_ROUTE_RULES",
    "GatewaySettings",
    "ProxyConfig",
    "ProxyMode",
    "RouteRule",
    "load_route_rules",
]

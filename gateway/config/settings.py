"""Pydantic Settings for the gateway service.

All environment variables use the GATEWAY_ prefix.
Example: GATEWAY_TARGET_DOMAIN=v2.a11yplan.de, GATEWAY_ENABLE_CORS=true
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_ROUTES_PATH = str(Path(__file__).with_name("routes.yaml"))


class ProxyMode(str, Enum):
    """How the engine serves a routed request."""

    PASSTHROUGH = "proxy-passthrough"
    CHALLENGE = "proxy-with-challenge-handling"
    REDIRECT = "redirect-only"


@dataclass(frozen=True)
class ProxyConfig:
    """Immutable per-request view of the proxy configuration."""

    target_domain: str
    bypass_token: str | None = None
    enable_cors: bool = False
    use_permanent_redirect: bool = False
    enable_cache_hint: bool = True
    client_ip_header: str = "cf-connecting-ip"
    mode: ProxyMode = ProxyMode.CHALLENGE

    @property
    def origin_host(self) -> str:
        """Target domain with any accidental scheme prefix or trailing slash removed."""
        host = self.target_domain.strip()
        for scheme in ("https://", "http://"):
            if host.lower().startswith(scheme):
                host = host[len(scheme):]
        return host.rstrip("/")

    @property
    def origin_base_url(self) -> str:
        return f"https://{self.origin_host}"


class GatewaySettings(BaseSettings):
    """Gateway service configuration validated from environment variables."""

    # Service
    port: int = 8080
    log_level: str = "INFO"

    # Origin
    target_domain: str = Field(default="v2.a11yplan.de", min_length=1)
    bypass_token: str | None = None
    upstream_timeout_seconds: float = Field(default=30.0, gt=0)
    upstream_connect_timeout_seconds: float = Field(default=10.0, gt=0)

    # Behaviour
    mode: ProxyMode = ProxyMode.CHALLENGE
    enable_cors: bool = False
    use_permanent_redirect: bool = False
    enable_cache_hint: bool = True
    client_ip_header: str = "cf-connecting-ip"  # Trusted edge header

    # Route table
    routes_path: str = DEFAULT_ROUTES_PATH

    model_config = {"env_prefix": "GATEWAY_"}

    def to_proxy_config(self) -> ProxyConfig:
        """Freeze the request-relevant settings into a ProxyConfig."""
        return ProxyConfig(
            target_domain=self.target_domain,
            bypass_token=self.bypass_token or None,
            enable_cors=self.enable_cors,
            use_permanent_redirect=self.use_permanent_redirect,
            enable_cache_hint=self.enable_cache_hint,
            client_ip_header=self.client_ip_header.lower(),
            mode=self.mode,
        )

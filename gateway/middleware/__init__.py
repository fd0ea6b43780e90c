"""Middleware package — error hierarchy and request ID."""

from gateway.middleware.error_handler import (
    GatewayError,
    InvalidDomainError,
    RouteConfigError,
    TransportError,
    UpstreamUnavailableError,
    error_response,
    register_error_handlers,
)
from gateway.middleware.request_id import RequestIdMiddleware

__all__ = [
    "GatewayError",
    "InvalidDomainError",
    "RequestIdMiddleware",
    "RouteConfigError",
    "TransportError",
    "UpstreamUnavailableError",
    "error_response",
    "register_error_handlers",
]

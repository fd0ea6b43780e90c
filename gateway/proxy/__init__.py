"""Proxy engine package — routing, header/cookie rewriting and challenge retry."""

from gateway.proxy.engine import ProxyEngine
from gateway.proxy.origin_client import OriginClient
from gateway.proxy.router import route
from gateway.proxy.types import FinalResponse, InboundRequest, LogRecord

__all__ = [
    "FinalResponse",
    "InboundRequest",
    "LogRecord",
    "OriginClient",
    "ProxyEngine",
    "route",
]

"""FastAPI application entry point with lifespan management.

Startup: configure logging, load the route table, open the pooled origin
HTTP client, build the proxy engine and mount the catch-all router.
Shutdown: close the origin HTTP client.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from gateway.config.routes import load_route_rules
from gateway.config.settings import GatewaySettings
from gateway.logging_config import configure_logging
from gateway.middleware.error_handler import register_error_handlers
from gateway.middleware.request_id import RequestIdMiddleware
from gateway.proxy.engine import ProxyEngine
from gateway.proxy.origin_client import OriginClient
from gateway.routers.proxy import create_proxy_router

logger = logging.getLogger(__name__)


def create_app(
    settings: GatewaySettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Loads ``GatewaySettings`` and the route table eagerly so that an invalid
    environment or an ambiguous route table fails at startup rather than on
    the first request.

    Parameters
    ----------
    settings:
        Explicit settings; read from ``GATEWAY_*`` environment variables when
        omitted.
    transport:
        Optional httpx transport for the origin client (tests use
        ``httpx.MockTransport``).
    """
    settings = settings or GatewaySettings()
    rules = load_route_rules(settings.routes_path)
    config = settings.to_proxy_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan: startup and shutdown logic."""
        configure_logging(settings.log_level)
        logger.info(
            "Starting gateway on port %d → %s (%s, %d routes)",
            settings.port,
            config.origin_base_url,
            config.mode.value,
            len(rules),
        )

        async with httpx.AsyncClient(
            transport=transport,
            timeout=httpx.Timeout(
                settings.upstream_timeout_seconds,
                connect=settings.upstream_connect_timeout_seconds,
            ),
            follow_redirects=False,
        ) as client:
            engine = ProxyEngine(OriginClient(client, config), config, rules)
            app.state.engine = engine
            app.include_router(create_proxy_router(engine=engine))

            logger.info("Gateway started successfully")
            yield

            logger.info("Shutting down gateway…")

        logger.info("Gateway shut down")

    app = FastAPI(
        title="a11y Gateway",
        version="1.0.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    register_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)

    return app


app = create_app()

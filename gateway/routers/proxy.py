"""Catch-all proxy endpoint.

Every method and path on every hostname is handed to the ProxyEngine; the
engine decides whether the hostname is routed. Errors raised by the engine
are rendered by the handlers in ``gateway.middleware.error_handler``; any
other failure becomes the same 503 response inside the route.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from fastapi import APIRouter, Request
from starlette.background import BackgroundTask
from starlette.responses import Response, StreamingResponse

from gateway.middleware.error_handler import (
    GatewayError,
    UpstreamUnavailableError,
    error_response,
)
from gateway.proxy.types import FinalResponse, InboundRequest

logger = logging.getLogger(__name__)

PROXIED_METHODS: list[str] = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def inbound_from_request(request: Request) -> InboundRequest:
    """Snapshot a Starlette request as an InboundRequest.

    The path is taken undecoded when the server provides it so percent-escapes
    reach the origin unchanged. The body stays a stream and is not read here.
    """
    raw_path = request.scope.get("raw_path")
    if raw_path:
        path = raw_path.split(b"?", 1)[0].decode("latin-1")
    else:
        path = request.url.path

    method = request.method.upper()
    return InboundRequest(
        method=method,
        hostname=(request.url.hostname or "").lower(),
        path=path or "/",
        query=request.url.query,
        headers=httpx.Headers(request.headers.raw),
        body=request.stream() if method not in ("GET", "HEAD") else None,
        request_id=getattr(request.state, "request_id", None),
    )


def to_starlette_response(final: FinalResponse) -> Response:
    """Convert a FinalResponse, keeping repeated headers as separate lines."""
    if isinstance(final.body, bytes):
        response: Response = Response(
            content=final.body,
            status_code=final.status_code,
        )
        skip = {"content-length"}
    else:
        response = StreamingResponse(
            final.body,
            status_code=final.status_code,
            background=BackgroundTask(final.close) if final.close else None,
        )
        skip = set()

    for name, value in final.headers:
        if name.lower() not in skip:
            response.headers.append(name, value)
    return response


def create_proxy_router(*, engine: Any = None) -> APIRouter:
    """Factory that creates the catch-all proxy router.

    Parameters
    ----------
    engine:
        ProxyEngine instance serving every request.
    """
    proxy_router = APIRouter(tags=["proxy"])

    @proxy_router.api_route("/{path:path}", methods=PROXIED_METHODS, include_in_schema=False)
    async def proxy(path: str, request: Request) -> Response:
        # Non-gateway failures are rendered here, inside the request-id middleware.
        final = None
        try:
            final = await engine.handle(inbound_from_request(request))
            return to_starlette_response(final)
        except GatewayError:
            raise
        except Exception:
            logger.exception("Failed to serve %s %s", request.method, request.url.path)
            if final is not None and final.close is not None:
                await final.close()
            return error_response(UpstreamUnavailableError())

    return proxy_router

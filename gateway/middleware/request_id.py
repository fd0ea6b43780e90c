"""Request ID middleware.

Propagates the edge's request identifier (``X-Request-ID``, then ``CF-Ray``)
or generates a UUID for every incoming request, stores it in
``request.state.request_id`` and echoes it in an ``X-Request-ID`` response
header so client reports can be matched with gateway log lines.
"""

from __future__ import annotations

import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

_SOURCE_HEADERS: tuple[str, ...] = ("x-request-id", "cf-ray")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Starlette middleware that assigns a request ID to each request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = next(
            (request.headers[h] for h in _SOURCE_HEADERS if request.headers.get(h)),
            None,
        ) or str(uuid.uuid4())
        request.state.request_id = request_id

        response: Response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

"""Gateway error hierarchy and FastAPI exception handlers.

All gateway-specific errors extend GatewayError. The FastAPI exception handlers
catch these errors (plus unhandled exceptions) and return a plain-text response
with the error's status code, message and extra headers. Internal detail never
reaches the client; it only goes to the log.
"""

from __future__ import annotations

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Error hierarchy
# ---------------------------------------------------------------------------


class GatewayError(Exception):
    """Base error for all gateway-specific errors."""

    status_code: int = 503
    message: str = "Service temporarily unavailable"
    headers: dict[str, str] = {"Retry-After": "60"}

    def __init__(self, message: str | None = None, **kwargs: object) -> None:
        self.message = message or self.__class__.message
        self.details = kwargs
        super().__init__(self.message)


class InvalidDomainError(GatewayError):
    """Inbound hostname matches none of the configured routes."""

    status_code = 400
    message = "Invalid domain configuration"
    headers = {"Cache-Control": "no-cache"}


class TransportError(GatewayError):
    """DNS, connection, timeout or stream failure while calling the origin."""

    status_code = 503
    message = "Service temporarily unavailable"
    headers = {"Retry-After": "60"}

    def __init__(self, cause: BaseException | None = None, **kwargs: object) -> None:
        self.cause = cause
        super().__init__(None, **kwargs)


class UpstreamUnavailableError(GatewayError):
    """Unexpected failure while proxying, surfaced like a transport failure."""

    status_code = 503
    message = "Service temporarily unavailable"
    headers = {"Retry-After": "60"}


class RouteConfigError(ValueError):
    """The static route table is ambiguous or malformed."""


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------


def _plain_text(
    status_code: int,
    message: str,
    headers: dict[str, str] | None = None,
) -> PlainTextResponse:
    """Build a plain-text error response."""
    return PlainTextResponse(
        content=message,
        status_code=status_code,
        headers=headers,
        media_type="text/plain",
    )


def error_response(exc: GatewayError) -> PlainTextResponse:
    """Render a GatewayError as the client-facing plain-text response."""
    return _plain_text(exc.status_code, exc.message, dict(exc.headers))


async def _gateway_error_handler(_request: Request, exc: GatewayError) -> PlainTextResponse:
    """Handle GatewayError subclasses."""
    return error_response(exc)


async def _unhandled_error_handler(_request: Request, exc: Exception) -> PlainTextResponse:
    """Catch-all for unhandled exceptions: log the traceback and return a generic 503."""
    logger.error(
        "Unhandled exception: %s\n%s",
        exc,
        traceback.format_exc(),
    )
    return error_response(UpstreamUnavailableError())


# ---------------------------------------------------------------------------
# Registration helper
# ---------------------------------------------------------------------------


def register_error_handlers(app: FastAPI) -> None:
    """Wire up all exception handlers on the FastAPI application."""
    app.add_exception_handler(GatewayError, _gateway_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error_handler)  # type: ignore[arg-type]

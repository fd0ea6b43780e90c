"""Per-request proxy pipeline.

Router → request header transformer → origin client → response transformer,
parameterized by :class:`ProxyMode`. Every handled request, successful or
not, produces exactly one structured log line.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable

from gateway.config.routes import RouteRule
from gateway.config.settings import ProxyConfig, ProxyMode
from gateway.middleware.error_handler import GatewayError, UpstreamUnavailableError
from gateway.proxy.headers import build_outbound_headers
from gateway.proxy.origin_client import OriginClient
from gateway.proxy.response import build_redirect, build_response
from gateway.proxy.router import route
from gateway.proxy.types import (
    FinalResponse,
    InboundRequest,
    LogRecord,
    OriginResult,
    RouteTarget,
)

logger = logging.getLogger(__name__)


class ProxyEngine:
    """Stateless request handler shared by all concurrent requests.

    Args:
        origin_client: Client used for origin calls.
        config: Immutable proxy configuration.
        rules: Validated route table.
    """

    def __init__(
        self,
        origin_client: OriginClient,
        config: ProxyConfig,
        rules: Iterable[RouteRule],
    ) -> None:
        self._origin = origin_client
        self._config = config
        self._rules = tuple(rules)

    @property
    def config(self) -> ProxyConfig:
        return self._config

    async def handle(self, inbound: InboundRequest) -> FinalResponse:
        """Serve *inbound* according to the configured mode.

        Raises:
            InvalidDomainError: hostname not routed (no origin call made).
            TransportError: the origin could not be reached.
            UpstreamUnavailableError: any other failure while proxying.
        """
        started = time.monotonic()
        record = LogRecord(
            method=inbound.method,
            path=inbound.path,
            target_url=None,
            status=UpstreamUnavailableError.status_code,
            duration_ms=0.0,
        )
        try:
            target = route(
                inbound.hostname, inbound.path, inbound.query, self._config, self._rules
            )
            record.target_url = target.url

            if self._config.mode is ProxyMode.REDIRECT:
                final = build_redirect(target.url, self._config)
            else:
                result = await self._fetch(inbound, target)
                record.challenged = result.challenged
                record.target_url = result.url
                try:
                    final = build_response(result, inbound, self._config)
                except Exception:
                    await result.response.aclose()
                    raise

            record.status = final.status_code
            record.cookie_count = len(final.get_all("set-cookie"))
            return final
        except GatewayError as exc:
            record.status = exc.status_code
            raise
        except Exception as exc:
            logger.exception(
                "Unexpected failure proxying %s %s%s",
                inbound.method,
                inbound.hostname,
                inbound.path,
            )
            raise UpstreamUnavailableError() from exc
        finally:
            record.duration_ms = round((time.monotonic() - started) * 1000, 2)
            self._emit(record, inbound)

    async def _fetch(self, inbound: InboundRequest, target: RouteTarget) -> OriginResult:
        headers = build_outbound_headers(inbound, target, self._config)
        body = inbound.body if inbound.has_body else None
        if self._config.mode is ProxyMode.CHALLENGE:
            return await self._origin.fetch_with_challenge_handling(
                inbound.method, target.url, headers, body
            )
        return await self._origin.fetch_passthrough(inbound.method, target.url, headers, body)

    def _emit(self, record: LogRecord, inbound: InboundRequest) -> None:
        logger.info(
            "%s %s -> %s %d",
            record.method,
            record.path,
            record.target_url or "-",
            record.status,
            extra={
                **record.as_extra(),
                "request_id": inbound.request_id,
                "mode": self._config.mode.value,
            },
        )

"""HTTP client for the origin, including the bot-protection challenge retry.

The origin answers suspicious first requests with a challenge: a ``307``
redirect (or a response carrying the protection-bypass marker) that sets
cookies. The challenge is solved by replaying a ``GET`` to the redirect
location with those cookies. At most one retry is made per request, so a
request costs at most two origin round trips.

Transport failures are never retried here; they surface as
:class:`TransportError`.
"""

from __future__ import annotations

import logging
from urllib.parse import urljoin

import httpx

from gateway.config.settings import ProxyConfig
from gateway.middleware.error_handler import TransportError
from gateway.proxy.cookies import cookie_header_from_set_cookies
from gateway.proxy.fingerprint import CHALLENGE_MARKER_HEADER, CHALLENGE_STATUS
from gateway.proxy.types import Body, OriginResult

logger = logging.getLogger(__name__)

# Dropped for the body-less retry. Host is re-derived from the retry URL,
# which may point at another host.
_RETRY_DROPPED_HEADERS: tuple[str, ...] = (
    "host",
    "content-length",
    "content-type",
    "transfer-encoding",
)


def is_challenge(response: httpx.Response) -> bool:
    """Heuristic matching the origin's bot-protection challenge."""
    return (
        response.status_code == CHALLENGE_STATUS
        or CHALLENGE_MARKER_HEADER in response.headers
    )


class OriginClient:
    """Issues origin calls over a shared :class:`httpx.AsyncClient`.

    Parameters
    ----------
    client:
        The pooled async client owned by the application lifespan. Timeouts
        are part of its configuration.
    config:
        Proxy configuration, used to resolve relative challenge locations.
    """

    def __init__(self, client: httpx.AsyncClient, config: ProxyConfig) -> None:
        self._client = client
        self._config = config

    # ------------------------------------------------------------------
    # Single call
    # ------------------------------------------------------------------

    async def call_origin(
        self,
        method: str,
        url: str,
        headers: httpx.Headers,
        body: Body | None = None,
        *,
        follow_redirects: bool = False,
    ) -> httpx.Response:
        """Send one request and return the streamed (unread) response.

        The caller owns the response and must ``aclose()`` it.

        Raises:
            TransportError: on DNS, connection, timeout or protocol failure.
        """
        request = self._client.build_request(method, url, headers=headers, content=body)
        try:
            return await self._client.send(
                request, stream=True, follow_redirects=follow_redirects
            )
        except httpx.HTTPError as exc:
            logger.error("Origin call failed: %s %s: %r", method, url, exc)
            raise TransportError(exc, url=url) from exc

    # ------------------------------------------------------------------
    # Engine entry points
    # ------------------------------------------------------------------

    async def fetch_passthrough(
        self,
        method: str,
        url: str,
        headers: httpx.Headers,
        body: Body | None = None,
    ) -> OriginResult:
        """Single origin call with redirects followed by the client."""
        response = await self.call_origin(method, url, headers, body, follow_redirects=True)
        return OriginResult(response=response, url=url)

    async def fetch_with_challenge_handling(
        self,
        method: str,
        url: str,
        headers: httpx.Headers,
        body: Body | None = None,
    ) -> OriginResult:
        """First call without redirects; replay once if challenged.

        A challenge without a ``Location`` header is passed through
        unchanged. A second challenge is never retried.
        """
        first = await self.call_origin(method, url, headers, body, follow_redirects=False)
        if not is_challenge(first):
            return OriginResult(response=first, url=url)

        location = first.headers.get("location")
        if not location:
            logger.warning(
                "Challenge without Location from %s (status %d), passing through",
                url,
                first.status_code,
            )
            return OriginResult(response=first, url=url, challenged=True)

        retry_headers = httpx.Headers([
            (name, value)
            for name, value in headers.multi_items()
            if name.lower() not in _RETRY_DROPPED_HEADERS
        ])
        challenge_cookies = first.headers.get_list("set-cookie")
        if challenge_cookies:
            retry_headers["Cookie"] = cookie_header_from_set_cookies(challenge_cookies)

        retry_url = self.resolve_location(location)
        await first.aclose()

        logger.info(
            "Challenge from %s, retrying GET %s with %d cookies",
            url,
            retry_url,
            len(challenge_cookies),
        )
        second = await self.call_origin("GET", retry_url, retry_headers, follow_redirects=True)
        return OriginResult(response=second, url=retry_url, challenged=True, retried=True)

    def resolve_location(self, location: str) -> str:
        """Absolute locations are kept; others resolve against the origin."""
        if location.lower().startswith(("http://", "https://")):
            return location
        return urljoin(self._config.origin_base_url + "/", location)

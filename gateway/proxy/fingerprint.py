"""Static browser-fingerprint tables shared by every engine mode.

The origin's bot protection compares User-Agent, Accept and Sec-Fetch-*
against what a real browser would send for the requested resource type, so
these values are copied from a desktop Chrome session.
"""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Default identity used when the client sends no User-Agent
# ---------------------------------------------------------------------------

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Client hints consistent with DEFAULT_USER_AGENT
DEFAULT_CLIENT_HINTS: dict[str, str] = {
    "Sec-Ch-Ua": '"Not_A Brand";v="8", "Chromium";v="120", "Google Chrome";v="120"',
    "Sec-Ch-Ua-Mobile": "?0",
    "Sec-Ch-Ua-Platform": '"Windows"',
}

DEFAULT_ACCEPT_LANGUAGE = "en-US,en;q=0.5"
DEFAULT_ACCEPT_ENCODING = "gzip, deflate, br"

DOCUMENT_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"


# ---------------------------------------------------------------------------
# Extension → fetch profile table (checked in order, first match wins)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ResourceProfile:
    """Accept value and Sec-Fetch-Dest a browser uses for one resource type."""

    kind: str
    accept: str
    sec_fetch_dest: str
    extensions: tuple[str, ...] = ()


RESOURCE_PROFILES: tuple[ResourceProfile, ...] = (
    ResourceProfile("script", "*/*", "script", (".js", ".mjs")),
    ResourceProfile("style", "text/css,*/*;q=0.1", "style", (".css",)),
    ResourceProfile(
        "image",
        "image/webp,image/apng,image/*,*/*;q=0.8",
        "image",
        (".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".ico"),
    ),
)

DOCUMENT_PROFILE = ResourceProfile("document", DOCUMENT_ACCEPT, "document")


def profile_for_path(path: str) -> ResourceProfile:
    """Pick the fetch profile for *path* by file extension (case-insensitive)."""
    lowered = path.lower()
    for profile in RESOURCE_PROFILES:
        if lowered.endswith(profile.extensions):
            return profile
    return DOCUMENT_PROFILE


# ---------------------------------------------------------------------------
# Header lists
# ---------------------------------------------------------------------------

# Inbound headers that may reach the origin. Everything else (edge client-IP,
# ray/trace ids, hop-by-hop) is dropped.
FORWARDED_REQUEST_HEADERS: tuple[str, ...] = (
    "accept",
    "accept-language",
    "accept-encoding",
    "content-type",
    "content-length",
    "authorization",
    "cache-control",
    "cookie",
    "if-match",
    "if-modified-since",
    "if-none-match",
    "if-range",
    "if-unmodified-since",
    "range",
    "referer",
    "user-agent",
)

# Origin-internal response headers that must not reach the public client
STRIPPED_RESPONSE_HEADERS: frozenset[str] = frozenset({
    "x-vercel-id",
    "x-vercel-cache",
    "x-vercel-deployment-url",
    "x-vercel-protection-bypass",
})

# Hop-by-hop headers; the serving layer frames the body itself
HOP_BY_HOP_HEADERS: frozenset[str] = frozenset({
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailer",
    "trailers",
    "transfer-encoding",
    "upgrade",
})

CHALLENGE_STATUS = 307
CHALLENGE_MARKER_HEADER = "x-vercel-protection-bypass"
BYPASS_TOKEN_HEADER = "X-Bypass-Token"

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Allow-Credentials": "true",
}

CACHE_HINT = "public, max-age=3600"

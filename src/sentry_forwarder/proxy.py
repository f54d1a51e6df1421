"""HTTP forwarding to the new Sentry DSN."""

import logging
from typing import Iterable

import httpx

from . import auth
from .config import FORWARD_TIMEOUT
from .errors import TransportError
from .mapping import Mapping

logger = logging.getLogger(__name__)

# Recomputed by httpx for the rewritten body
SKIP_REQUEST_HEADERS = ("content-length", "transfer-encoding")

# Persistent client for connection pooling
_client: httpx.AsyncClient | None = None


async def get_client() -> httpx.AsyncClient:
    """Get or create the HTTP client."""
    global _client
    if _client is None:
        _client = httpx.AsyncClient(
            timeout=httpx.Timeout(FORWARD_TIMEOUT, connect=10.0),
        )
    return _client


async def close():
    """Close the HTTP client."""
    global _client
    if _client:
        await _client.aclose()
        _client = None


def envelope_url(mapping: Mapping) -> str:
    """The envelope endpoint for the new DSN."""
    return f"{mapping.new_scheme}://{mapping.new_host}/api{mapping.new_path}/envelope/"


def header_bytes(value: str) -> bytes:
    """Inbound values round-trip through latin-1; configured ones may need UTF-8."""
    try:
        return value.encode("latin-1")
    except UnicodeEncodeError:
        return value.encode("utf-8")


def build_headers(headers: Iterable[tuple[str, str]], mapping: Mapping) -> dict[str, bytes]:
    """Build outbound headers from the inbound ones.

    Repeated headers collapse to their first value. The sentry_key in
    X-Sentry-Auth is swapped for the new one and Host points at the new DSN.

    Values go out as latin-1 bytes, the way Starlette decoded them, so
    non-ASCII header bytes reach upstream unchanged.
    """
    out: dict[str, str] = {}
    for name, value in headers:
        name = name.lower()
        if name in SKIP_REQUEST_HEADERS or name in out:
            continue
        out[name] = value

    auth_header = auth.SENTRY_AUTH_HEADER.lower()
    old_user = mapping.old_user
    new_user = mapping.new_user
    if auth_header in out and old_user is not None and new_user is not None:
        out[auth_header] = auth.replace_key(out[auth_header], old_user, new_user)

    out["host"] = mapping.new_host
    return {name: header_bytes(value) for name, value in out.items()}


async def forward_request(url: str, headers: dict[str, bytes], content: bytes) -> httpx.Response:
    """POST the rewritten envelope upstream.

    Any httpx failure (connect, timeout, protocol) comes back as TransportError.
    """
    client = await get_client()
    try:
        return await client.post(url, headers=headers, content=content)
    except httpx.HTTPError as e:
        raise TransportError(str(e) or type(e).__name__) from e

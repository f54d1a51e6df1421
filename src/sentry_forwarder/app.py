"""Sentry Forwarder - FastAPI application.

Takes envelopes sent to an old DSN and ships them to the new one.
"""

import json
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
import logfire
from starlette.requests import ClientDisconnect

from . import auth, proxy
from .config import load_config
from .errors import BodyReadError, PayloadDecodeError, TransportError, UnroutableCredential
from .mapping import Mapping, get_mapping
from .payload import convert_payload

logger = logging.getLogger(__name__)

UNKNOWN_DSN_ERROR = "unknown DSN for forwarding"

# Only ships to Logfire when LOGFIRE_TOKEN is set; console output otherwise
logfire.configure(
    service_name="sentry-forwarder",
    send_to_logfire="if-token-present",
    distributed_tracing=False,
    scrubbing=False,
)
logfire.instrument_httpx()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    logfire.info("Sentry Forwarder is starting up...")
    # ConfigLoadError propagates: no mappings, no server
    app.state.mappings = load_config()
    logfire.info("Sentry Forwarder is ready.", mappings=len(app.state.mappings))
    yield
    logfire.info("Sentry Forwarder is shutting down...")
    await proxy.close()


app = FastAPI(
    title="Sentry Forwarder",
    description="Forwards Sentry envelopes from old DSNs to new ones.",
    lifespan=lifespan,
)

logfire.instrument_fastapi(app)


def json_error(message: str, status_code: int = 500) -> Response:
    return Response(
        content=json.dumps({"error": message}),
        status_code=status_code,
        media_type="application/json",
    )


def resolve(request: Request) -> tuple[str, Mapping]:
    """Find the mapping for the request's sentry_key or raise UnroutableCredential."""
    key = auth.get_sentry_key(request.headers.get(auth.SENTRY_AUTH_HEADER))
    mapping = get_mapping(key, request.app.state.mappings)
    if mapping is None:
        raise UnroutableCredential(key)
    return key, mapping


async def read_body(request: Request) -> bytes:
    try:
        return await request.body()
    except ClientDisconnect as e:
        raise BodyReadError("client disconnected before the body was read") from e


@app.get("/health")
async def health(request: Request):
    """Health check endpoint."""
    return {
        "status": "ok",
        "service": "sentry-forwarder",
        "mappings": len(request.app.state.mappings),
    }


@app.post("/{path:path}")
async def handle_request(request: Request, path: str):
    """Rewrite an envelope for its new DSN and forward it."""

    try:
        key, mapping = resolve(request)
    except UnroutableCredential as e:
        logger.warning(str(e))
        return json_error(UNKNOWN_DSN_ERROR)

    headers = proxy.build_headers(request.headers.items(), mapping)
    url = proxy.envelope_url(mapping)
    logger.info(f"Forwarding from {mapping.old_dsn} to {mapping.new_dsn}")

    with logfire.span(
        "forward {old_key} -> {new_key}",
        old_key=key[:8],
        new_key=(mapping.new_user or "")[:8],
        endpoint=f"/{path}",
        upstream=url,
    ) as span:
        try:
            body = await read_body(request)
            content = convert_payload(body, mapping)
        except (BodyReadError, PayloadDecodeError) as e:
            logger.error(f"Cannot rewrite request for key {key}: {e}")
            span.set_level("error")
            return PlainTextResponse(str(e), status_code=500)

        try:
            upstream_response = await proxy.forward_request(url, headers, content)
        except TransportError as e:
            logger.error(f"Forwarding to {url} failed: {e}")
            span.set_level("error")
            return json_error(str(e))

        span.set_attribute("http.status_code", upstream_response.status_code)

        return Response(
            content=upstream_response.content,
            status_code=upstream_response.status_code,
            media_type="application/json",
        )

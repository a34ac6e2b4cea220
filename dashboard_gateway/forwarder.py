"""Path-based reverse proxy.

The inbound request is relayed once to ``destination_base/<subpath>?<query>``
and the upstream status, headers and raw body bytes are streamed back.
No retry: a failed attempt is reported to the caller as a ``ForwardFailure``.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Iterable
from dataclasses import dataclass

import httpx
from fastapi import Request
from fastapi.responses import Response, StreamingResponse
from starlette.background import BackgroundTask

from .http_utils import error_response

logger = logging.getLogger(__name__)

DISCONNECT_POLL_SECONDS = 0.5
# nginx "client closed request"; only ever logged, the caller is gone.
CLIENT_CLOSED_REQUEST = 499

# Connection-scoped headers (RFC 9110 section 7.6.1); never relayed in either direction.
HOP_BY_HOP_HEADERS = frozenset({
    b"connection",
    b"keep-alive",
    b"proxy-authenticate",
    b"proxy-authorization",
    b"te",
    b"trailer",
    b"transfer-encoding",
    b"upgrade",
})


@dataclass(frozen=True)
class ForwardFailure:
    """A forwarding attempt that produced no upstream response."""

    status_code: int
    error: str


def build_target_url(destination_base: str, subpath: str, raw_query: str) -> str:
    """Join the proxy target. The '?' is kept even when raw_query is empty."""
    return destination_base + "/" + subpath + "?" + raw_query


def failure_status(exc: httpx.RequestError) -> int:
    if isinstance(exc, httpx.TimeoutException):
        return 504
    if isinstance(exc, httpx.ConnectError):
        return 503
    return 502


def _filter_headers(
    raw_headers: Iterable[tuple[bytes, bytes]], drop: Iterable[bytes] = ()
) -> list[tuple[bytes, bytes]]:
    excluded = HOP_BY_HOP_HEADERS.union(drop)
    return [(key.lower(), value) for key, value in raw_headers if key.lower() not in excluded]


def _has_body(request: Request) -> bool:
    return "content-length" in request.headers or "transfer-encoding" in request.headers


async def _stream_body(request: Request, body_sent: asyncio.Event) -> AsyncIterator[bytes]:
    try:
        async for chunk in request.stream():
            yield chunk
    finally:
        body_sent.set()


async def _wait_for_disconnect(request: Request, body_sent: asyncio.Event) -> None:
    # Polling receive() while the body is still being read would steal body chunks.
    await body_sent.wait()
    while not await request.is_disconnected():
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


async def _send_unless_disconnected(
    request: Request,
    http_client: httpx.AsyncClient,
    upstream_request: httpx.Request,
    body_sent: asyncio.Event,
) -> httpx.Response | None:
    """Send upstream; None when the caller went away before the response headers arrived."""
    send = asyncio.ensure_future(http_client.send(upstream_request, stream=True))
    watcher = asyncio.ensure_future(_wait_for_disconnect(request, body_sent))
    try:
        await asyncio.wait({send, watcher}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        watcher.cancel()
        if not send.done():
            send.cancel()
    if not send.cancelled() and send.done():
        return send.result()
    (outcome,) = await asyncio.gather(send, return_exceptions=True)
    if isinstance(outcome, httpx.Response):
        await outcome.aclose()
    return None


async def open_upstream(
    request: Request, target_url: str, http_client: httpx.AsyncClient
) -> httpx.Response | ForwardFailure:
    """Send the inbound request upstream and return the still-open streaming response."""
    body_sent = asyncio.Event()
    content = None
    if _has_body(request):
        content = _stream_body(request, body_sent)
    else:
        body_sent.set()
    upstream_request = http_client.build_request(
        request.method,
        target_url,
        headers=_filter_headers(request.headers.raw, drop=(b"host",)),
        content=content,
    )
    try:
        upstream = await _send_unless_disconnected(request, http_client, upstream_request, body_sent)
    except httpx.RequestError as e:
        status_code = failure_status(e)
        logger.warning(
            "Proxy %s %s failed (%d): %s", request.method, target_url, status_code, e
        )
        return ForwardFailure(status_code=status_code, error=str(e) or type(e).__name__)
    if upstream is None:
        logger.info("Proxy %s %s aborted: client disconnected", request.method, target_url)
        return ForwardFailure(status_code=CLIENT_CLOSED_REQUEST, error="Client closed request")
    return upstream


async def _relay(upstream: httpx.Response) -> AsyncIterator[bytes]:
    try:
        async for chunk in upstream.aiter_raw():
            yield chunk
    finally:
        await upstream.aclose()


async def forward(
    request: Request,
    subpath: str,
    destination_base: str,
    http_client: httpx.AsyncClient,
) -> Response:
    """Proxy request to destination_base/subpath, preserving the raw query string."""
    try:
        httpx.URL(str(request.url))
    except httpx.InvalidURL as e:
        return error_response(404, "Invalid request URL", str(e))

    target_url = build_target_url(destination_base, subpath, request.url.query)
    logger.debug("Proxy %s -> %s", request.method, target_url)

    result = await open_upstream(request, target_url, http_client)
    if isinstance(result, ForwardFailure):
        return error_response(result.status_code, "Proxy request failed", result.error)

    response = StreamingResponse(
        _relay(result),
        status_code=result.status_code,
        background=BackgroundTask(result.aclose),
    )
    response.raw_headers = _filter_headers(result.headers.raw)
    return response

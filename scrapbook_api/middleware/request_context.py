"""Per-request id and timing.

The id comes from an incoming ``X-Request-ID`` header when the client sends
one, so a client can correlate its own logs with error envelopes.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from time import perf_counter
from typing import Awaitable, Callable
from uuid import uuid4

from fastapi import Request, Response

from scrapbook_api.schemas.envelope import ResponseMeta

REQUEST_ID_HEADER = "X-Request-ID"


@dataclass
class RequestContext:
    request_id: str
    start_time: float


def create_request_context(request_id: str | None = None) -> RequestContext:
    return RequestContext(request_id=request_id or str(uuid4()), start_time=perf_counter())


def context_for(request: Request) -> RequestContext:
    """Context stored by the middleware, or a fresh one outside it."""
    context = getattr(request.state, "context", None)
    if context is None:
        context = create_request_context(request.headers.get(REQUEST_ID_HEADER))
        request.state.context = context
    return context


async def request_context_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    context = context_for(request)
    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = context.request_id
    return response


def build_meta(context: RequestContext, api_version: str = "1.0") -> ResponseMeta:
    return ResponseMeta(
        api_version=api_version,
        processing_time_ms=int((perf_counter() - context.start_time) * 1000),
        timestamp=datetime.now(timezone.utc),
    )

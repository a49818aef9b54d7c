"""Per-request log context and access logging."""

import time

from asgi_correlation_id import correlation_id
from fastapi import Request, Response
from starlette.middleware.base import RequestResponseEndpoint

from src.codestack.core.logging import bind_request_context, clear_request_context, get_logger

logger = get_logger(__name__)

# Polled by probes and scrapers; logging them would drown the API traffic.
UNLOGGED_PATHS = frozenset({"/health", "/metrics"})


async def logging_context_middleware(
    request: Request, call_next: RequestResponseEndpoint
) -> Response:
    """Bind request_id, method and path for every log line of the request.

    Each snippet request also gets one access line with its status code and
    duration. Unhandled errors propagate to the generic exception handler,
    which logs them itself.
    """
    clear_request_context()
    bind_request_context(correlation_id.get(), method=request.method, path=request.url.path)
    started = time.perf_counter()
    try:
        response = await call_next(request)
        if request.url.path not in UNLOGGED_PATHS:
            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
        return response
    finally:
        clear_request_context()

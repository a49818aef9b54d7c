"""Rate limiting for snippet mutations.

Every POST, PUT and DELETE under /api/snippets is limited per client address
(default 50 per day). Counters live in Redis when REDIS_URL is configured so
that all API processes share them. Without Redis the limiter falls back to
slowapi's in-memory storage: that store is per process, resets on restart and
is only suitable for a single-instance development setup.
"""

from asgi_correlation_id import correlation_id
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from src.codestack.core.config import get_settings
from src.codestack.core.logging import get_logger
from src.codestack.core.redis import KEY_PREFIX, limiter_storage_uri

logger = get_logger(__name__)


def get_rate_limit_key(request: Request) -> str:
    """Generate rate limit key from client IP only.

    Never include user-controlled values (headers, body fields) in the key:
    rotating them would create unlimited fresh buckets.
    """
    ip = get_remote_address(request) or "unknown"
    return ip


def mutation_limit() -> str:
    """Limit string applied to snippet create/update/delete routes."""
    return get_settings().rate_limit_mutations


def create_limiter() -> Limiter:
    """Create rate limiter with appropriate storage backend.

    Counters go to the shared Redis under KEY_PREFIX when one is configured,
    otherwise to process memory. Disabled in the testing environment.
    """
    settings = get_settings()

    if settings.app_env == "testing":
        logger.info("Rate limiter disabled (testing environment)")
        return Limiter(key_func=get_rate_limit_key, enabled=False)

    storage_uri = limiter_storage_uri()
    if storage_uri:
        logger.info("Rate limiter using Redis backend", key_prefix=KEY_PREFIX)
        return Limiter(
            key_func=get_rate_limit_key, storage_uri=storage_uri, key_prefix=KEY_PREFIX
        )

    logger.info("Rate limiter using in-memory backend (not distributed)")
    return Limiter(key_func=get_rate_limit_key)


# Reads settings at import time; reconfiguring requires a restart.
limiter = create_limiter()


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return a JSON 429 naming the limit that was hit."""
    client_ip = get_rate_limit_key(request)
    logger.warning(
        "Mutation rate limit exceeded",
        client_ip=client_ip,
        path=request.url.path,
        method=request.method,
        limit=str(exc.detail),
    )
    return JSONResponse(
        status_code=429,
        content={
            "detail": f"Too many requests. Limit for this operation is {exc.detail}.",
            "request_id": correlation_id.get(),
        },
    )

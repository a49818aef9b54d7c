"""Shared Redis connection for the snippet API.

Redis is optional and holds only the mutation rate-limit counters, which
slowapi writes under ``KEY_PREFIX``. The health endpoint reports it as a
secondary dependency: losing it degrades the service rather than taking
it down.
"""

from redis.asyncio import Redis
from redis.exceptions import RedisError

from src.codestack.core.config import get_settings
from src.codestack.core.logging import get_logger

logger = get_logger(__name__)

KEY_PREFIX = "codestack"

_client: Redis | None = None


def limiter_storage_uri() -> str | None:
    """Storage URI for rate-limit counters, or None to keep them in process memory."""
    return get_settings().redis_url or None


async def get_redis() -> Redis | None:
    """Return the shared client, created on first use; None when REDIS_URL is unset.

    Creating the client does not connect. Connection errors surface on the
    first command, so callers decide how to degrade.
    """
    global _client

    if _client is not None:
        return _client

    settings = get_settings()
    if not settings.redis_url:
        return None

    _client = Redis.from_url(
        settings.redis_url,
        max_connections=settings.redis_pool_size,
        decode_responses=True,
    )
    logger.info("Redis client created", pool_size=settings.redis_pool_size)
    return _client


async def redis_status() -> str:
    """Ping Redis for the health report: healthy, unhealthy or not_configured."""
    client = await get_redis()
    if client is None:
        return "not_configured"

    try:
        await client.ping()  # type: ignore[misc]
    except (RedisError, OSError) as e:
        logger.warning("Redis health check failed", error=str(e))
        return "unhealthy"
    return "healthy"


async def close_redis() -> None:
    """Close the shared client. Called during application shutdown."""
    global _client

    if _client is not None:
        await _client.aclose()
        logger.info("Redis connection closed")
    _client = None


def reset_redis_state() -> None:
    """Forget the shared client without closing it (for tests)."""
    global _client
    _client = None

"""
Redis Connection Module

Provides the asynchronous Redis client backing the OAuth state store and the
access-token blocklist. The client is handed out as a FastAPI dependency and
closed after the request.

**Security Note**: Use a rediss:// URL when Redis is reached over an untrusted
network. Never log REDIS_URL, it may carry the password.

Functions:
    get_redis: A FastAPI dependency that yields an asynchronous Redis client instance.
"""

from typing import AsyncGenerator

from redis.asyncio import Redis
from redis.exceptions import RedisError
from structlog import get_logger

from src.core.config.settings import settings

logger = get_logger(__name__)


async def get_redis() -> AsyncGenerator[Redis, None]:
    """
    Provides an asynchronous Redis client.

    Yields:
        Redis: An asynchronous Redis client instance with decoded responses.
    """
    redis = Redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)
    logger.debug("Redis connection created")
    try:
        yield redis
    finally:
        await redis.aclose()
        logger.debug("Redis connection closed")


async def check_redis_health() -> bool:
    """Ping Redis once, reporting failure instead of raising."""
    redis = Redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)
    try:
        return bool(await redis.ping())
    except (RedisError, OSError) as e:
        logger.error("redis_health_check_failed", error=str(e))
        return False
    finally:
        await redis.aclose()

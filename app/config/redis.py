"""
Redis connection used to health-check the Celery broker

The booking path never talks to Redis directly: notifications are published
through Celery. This pool only backs the detailed health check.
"""
import logging
from typing import Optional

import redis.asyncio as redis

from app.config.settings import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

_redis_pool: Optional[redis.ConnectionPool] = None


def get_redis_pool() -> redis.ConnectionPool:
    """Get or create the shared pool (short timeouts so a health check cannot hang)"""
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = redis.ConnectionPool.from_url(
            settings.REDIS_URL,
            max_connections=settings.REDIS_MAX_CONNECTIONS,
            socket_timeout=settings.CELERY_PUBLISH_TIMEOUT_SECONDS,
            socket_connect_timeout=settings.CELERY_PUBLISH_TIMEOUT_SECONDS,
        )
    return _redis_pool


async def ping_redis() -> bool:
    """True when the broker answers PING"""
    client = redis.Redis(connection_pool=get_redis_pool())
    try:
        return bool(await client.ping())
    finally:
        await client.aclose()


async def close_redis_pool() -> None:
    global _redis_pool
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None
        logger.info("Redis pool closed")

"""Async Redis client utilities for the native counter backend."""

import redis.asyncio as redis

from merse.utils.settings.redis import RedisSettings

# Global connection pool - initialized once, reused everywhere
_redis_pool: redis.ConnectionPool | None = None


def _ensure_redis_pool(url: str | None = None) -> redis.ConnectionPool:
    """Ensure Redis connection pool is initialized."""
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = redis.ConnectionPool.from_url(
            url or RedisSettings().REDIS_URL, decode_responses=True
        )
    return _redis_pool


def get_redis_client(url: str | None = None) -> redis.Redis:
    """Get a Redis client bound to the shared pool."""
    return redis.Redis(connection_pool=_ensure_redis_pool(url))


async def close_redis_pool() -> None:
    """Close Redis connection pool - called during app shutdown."""
    global _redis_pool
    if _redis_pool:
        await _redis_pool.disconnect()
        _redis_pool = None


"""
Centralized Redis client manager with connection pooling.
Backs the Redis greeting counter store; a single pool is reused per process.
"""
import logging

import redis
from redis.connection import ConnectionPool

from app.core.config import settings

logger = logging.getLogger(__name__)

_pool: ConnectionPool | None = None
_client: redis.Redis | None = None


def get_redis_pool() -> ConnectionPool:
    """Get or create a shared Redis connection pool."""
    global _pool
    if _pool is not None:
        return _pool

    redis_url = settings.REDIS_URL
    if not redis_url:
        raise RuntimeError("REDIS_URL is not configured")

    pool_kwargs = {
        "max_connections": 10,
        "socket_timeout": 5,
        "socket_connect_timeout": 5,
        "retry_on_timeout": True,
        "health_check_interval": 30,
        "decode_responses": True,  # Return strings instead of bytes
    }

    _pool = ConnectionPool.from_url(redis_url, **pool_kwargs)
    logger.info("Redis connection pool created (max_connections=10)")
    return _pool


def get_redis_client() -> redis.Redis:
    """Get or create a Redis client using the shared connection pool."""
    global _client
    if _client is not None:
        return _client

    pool = get_redis_pool()
    _client = redis.Redis(connection_pool=pool)
    return _client


def close_redis_pool():
    """Close the Redis connection pool. Called on app shutdown."""
    global _pool, _client
    if _client is not None:
        _client.close()
        _client = None
    if _pool is not None:
        _pool.disconnect()
        _pool = None
    logger.info("Redis pool closed")

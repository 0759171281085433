"""
Redis client lifecycle.

The client is created in the app lifespan and kept on app.state;
routers receive it through the get_redis dependency. No URL configured
→ None, and caching/locking are skipped.
"""

import logging
from typing import Optional

from fastapi import Request
from redis import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

REDIS_SOCKET_TIMEOUT = 2.0


def open_redis(redis_url: Optional[str]) -> Optional[Redis]:
    if not redis_url:
        logger.info("REDIS_URL not set, availability cache disabled")
        return None

    client = Redis.from_url(
        redis_url,
        decode_responses=True,
        socket_timeout=REDIS_SOCKET_TIMEOUT,
    )
    try:
        client.ping()
        logger.info("Redis connection initialized")
    except RedisError as e:
        logger.warning(f"Redis ping failed ({e}), continuing without cache")
        client.close()
        return None
    return client


def close_redis(client: Optional[Redis]) -> None:
    if client is not None:
        client.close()


def redis_healthy(client: Optional[Redis]) -> bool:
    if client is None:
        return False
    try:
        return bool(client.ping())
    except RedisError:
        return False


# Dependency for FastAPI
def get_redis(request: Request) -> Optional[Redis]:
    return getattr(request.app.state, "redis", None)

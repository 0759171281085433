# backend/heyu_booking/services/slots/invalidator.py
"""
Cache invalidation for computed availability.

Triggers:
✓ Booking created → invalidate that date
✓ Blocked date created/changed/deleted → invalidate that date
✓ All bookings cleared → invalidate everything

Does NOT trigger:
✗ Service changes (cache is keyed by duration, not by service)

Invalidation runs after the database commit. It also bumps the date generation,
so a lookup that loaded the database before the commit does not cache its result.

Redis errors are logged and swallowed: a stale cache entry expires by TTL.
"""

import logging
from datetime import date
from redis import Redis
from redis.exceptions import RedisError

from .redis_store import AvailabilityRedisStore

logger = logging.getLogger(__name__)


def invalidate_availability_cache(
    redis: Redis | None,
    dates: list[str | date] | None = None,
) -> int:
    """
    Invalidate cached availability.

    Args:
        redis: Redis client, or None when caching is disabled
        dates: Specific dates to invalidate, or None for all dates

    Returns:
        Number of deleted cache keys
    """
    if redis is None:
        return 0

    store = AvailabilityRedisStore(redis)
    try:
        return store.delete_slots(dates)
    except RedisError:
        logger.exception("Failed to invalidate availability cache for %s", dates or "all dates")
        return 0

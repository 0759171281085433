# backend/heyu_booking/services/slots/redis_store.py
"""
Redis cache for computed availability using Sorted Sets.

Key format: slots:avail:{date}:{duration_hours}h
Value: Sorted Set where member = "HH:MM", score = minutes since midnight.

Availability only depends on the date's bookings/blocks and the service
duration, so services with the same duration share an entry.
Sentinel: "__empty__" with score=-1 marks "calculated, zero slots".

Generation counters (slots:gen and slots:gen:{date}) are bumped on every
invalidation. A reader snapshots them before loading the database and
only writes its result while they are unchanged (WATCH/MULTI), so a
computation that raced a booking never repopulates the cache.
"""

import logging
from datetime import date
from redis import Redis
from redis.exceptions import WatchError

logger = logging.getLogger(__name__)

EMPTY_SENTINEL = "__empty__"
GENERATION_TTL = 86400  # seconds


def _decode(member) -> str:
    return member.decode() if isinstance(member, bytes) else member


def _score(time_str: str) -> int:
    hour, minute = time_str.split(":")
    return int(hour) * 60 + int(minute)


class AvailabilityRedisStore:
    """Redis storage wrapper for computed day availability."""

    KEY_PREFIX = "slots:avail"
    GENERATION_PREFIX = "slots:gen"

    def __init__(self, redis: Redis, ttl_seconds: int = 300):
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    def _key(self, date_str: str, duration_hours: int) -> str:
        return f"{self.KEY_PREFIX}:{date_str}:{duration_hours}h"

    def _generation_keys(self, date_str: str) -> tuple[str, str]:
        return self.GENERATION_PREFIX, f"{self.GENERATION_PREFIX}:{date_str}"

    # ── Generation ───────────────────────────────────────────────────────

    def generation(self, date_str: str) -> tuple:
        """Snapshot of the global and per-date invalidation counters."""
        return tuple(self.redis.mget(*self._generation_keys(date_str)))

    def bump_generation(self, dates: list[str] | None = None) -> None:
        keys = (
            [self._generation_keys(d)[1] for d in dates]
            if dates
            else [self.GENERATION_PREFIX]
        )
        for key in keys:
            self.redis.incr(key)
            self.redis.expire(key, GENERATION_TTL)

    # ── Write ────────────────────────────────────────────────────────────

    def store_slots(
        self,
        date_str: str,
        duration_hours: int,
        slots: list[str],
        generation: tuple | None = None,
    ) -> bool:
        """
        Store computed slots for a date/duration.

        Empty list → sentinel is stored.
        With a generation snapshot, nothing is written if the date was
        invalidated since the snapshot was taken.

        Returns:
            True when the entry was written.
        """
        key = self._key(date_str, duration_hours)
        pipe = self.redis.pipeline()

        try:
            if generation is not None:
                gen_keys = self._generation_keys(date_str)
                pipe.watch(*gen_keys)
                if tuple(pipe.mget(*gen_keys)) != generation:
                    logger.debug(f"Availability for {date_str} invalidated during computation, not cached")
                    return False
                pipe.multi()

            pipe.delete(key)
            if slots:
                pipe.zadd(key, {time_str: _score(time_str) for time_str in slots})
            else:
                # Empty day: sentinel so EXISTS returns True
                pipe.zadd(key, {EMPTY_SENTINEL: -1})
            pipe.expire(key, self.ttl_seconds)

            pipe.execute()
        except WatchError:
            logger.debug(f"Availability for {date_str} invalidated during write, not cached")
            return False
        finally:
            pipe.reset()
        return True

    # ── Read ─────────────────────────────────────────────────────────────

    def get_slots(self, date_str: str, duration_hours: int) -> list[str] | None:
        """
        Get cached slots.

        Returns:
            Sorted list of "HH:MM" strings, or None on cache miss.
        """
        key = self._key(date_str, duration_hours)
        if not self.redis.exists(key):
            return None

        members = self.redis.zrange(key, 0, -1)
        return [
            _decode(m)
            for m in members
            if _decode(m) != EMPTY_SENTINEL
        ]

    # ── Delete ───────────────────────────────────────────────────────────

    def delete_slots(self, dates: list[str | date] | None = None) -> int:
        """
        Delete cached slots and bump the matching generation counters.

        Args:
            dates: Specific dates, or None to delete everything.

        Returns:
            Number of deleted keys.
        """
        date_strs = [dt.isoformat() if isinstance(dt, date) else dt for dt in dates] if dates else None
        self.bump_generation(date_strs)

        if date_strs:
            keys = []
            for date_str in date_strs:
                keys.extend(self.redis.scan_iter(match=f"{self.KEY_PREFIX}:{date_str}:*"))
        else:
            keys = list(self.redis.scan_iter(match=f"{self.KEY_PREFIX}:*"))

        if not keys:
            return 0

        return self.redis.delete(*keys)

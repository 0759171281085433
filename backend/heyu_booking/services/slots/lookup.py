# backend/heyu_booking/services/slots/lookup.py
"""
Availability lookup for the API layer.

Loads the day's bookings and blocks from the database, runs the engine,
and caches the result in Redis when a client is available.
"""

import logging
from redis import Redis
from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from ...models.tables import BlockedDates as DBBlockedDates, Bookings as DBBookings
from .availability import compute_available_slots
from .blocks import DayBlock
from .config import BookingConfig, get_booking_config, normalize_date_str
from .conflicts import BookedInterval
from .duration import resolve_service_duration
from .redis_store import AvailabilityRedisStore

logger = logging.getLogger(__name__)


def calculate_service_availability(
    db: Session,
    target_date: str,
    service,
    config: BookingConfig | None = None,
    redis: Redis | None = None,
    cache_ttl: int = 300,
) -> list[str]:
    """
    Available "HH:MM" start times for service on target_date.

    Cache miss or Redis failure → computed on the fly.
    """
    config = config or get_booking_config()
    if service is None:
        return []

    date_str = normalize_date_str(target_date)
    duration = resolve_service_duration(service, config.default_duration_hours)

    store = AvailabilityRedisStore(redis, cache_ttl) if redis is not None else None
    generation = None
    if store is not None and date_str:
        try:
            cached = store.get_slots(date_str, duration)
            if cached is not None:
                return cached
            # Taken before the database read
            generation = store.generation(date_str)
        except RedisError:
            logger.exception("Availability cache read failed for %s", date_str)
            store = None

    slots = compute_available_slots(
        date_str,
        service,
        load_day_bookings(db, date_str),
        load_day_blocks(db, date_str),
        config,
    )

    if store is not None and date_str:
        try:
            store.store_slots(date_str, duration, slots, generation=generation)
        except RedisError:
            logger.exception("Availability cache write failed for %s", date_str)

    return slots


# ── Database helpers ─────────────────────────────────────────────────────


def load_day_bookings(db: Session, date_str: str | None) -> list[BookedInterval]:
    """Confirmed bookings on date, normalized."""
    from ..ingest import interval_from_row

    if not date_str:
        return []

    rows = (
        db.query(DBBookings)
        .filter(
            DBBookings.selected_date == date_str,
            DBBookings.status == "confirmed",
        )
        .all()
    )
    return [interval_from_row(row) for row in rows]


def load_day_blocks(db: Session, date_str: str | None) -> list[DayBlock]:
    from ..ingest import block_from_row

    if not date_str:
        return []

    row = db.get(DBBlockedDates, date_str)
    if row is None:
        return []
    block = block_from_row(row)
    return [block] if block is not None else []

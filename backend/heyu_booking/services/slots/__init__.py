# backend/heyu_booking/services/slots/__init__.py
"""
Slots calculation module.

Rules: duration parsing, business hours, default grid (pure)
Engine: service availability for a date (pure)
Lookup: database loading + Redis cache around the engine
"""

from .config import BookingConfig, get_booking_config
from .duration import parse_duration, resolve_service_duration
from .calculator import (
    default_slots,
    get_closing_hour,
    is_evening_time,
    is_slot_valid,
)
from .conflicts import BookedInterval, is_slot_booked
from .blocks import FullDayBlock, PartialBlock, DayBlock, is_slot_blocked, is_day_blocked
from .availability import compute_available_slots
from .redis_store import AvailabilityRedisStore
from .invalidator import invalidate_availability_cache
from .lookup import calculate_service_availability

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "parse_duration",
    "resolve_service_duration",
    "default_slots",
    "get_closing_hour",
    "is_evening_time",
    "is_slot_valid",
    "BookedInterval",
    "is_slot_booked",
    "FullDayBlock",
    "PartialBlock",
    "DayBlock",
    "is_slot_blocked",
    "is_day_blocked",
    "compute_available_slots",
    "AvailabilityRedisStore",
    "invalidate_availability_cache",
    "calculate_service_availability",
]

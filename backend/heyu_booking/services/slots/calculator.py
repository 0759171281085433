# backend/heyu_booking/services/slots/calculator.py
"""
Day-level slot rules.

Contains:
✓ business hours (closing hour per weekday)
✓ default slot grid
✓ duration fit before closing
✓ evening rule for long services

Does NOT contain:
✗ Bookings (see conflicts.py)
✗ Admin blocks (see blocks.py)
"""

from datetime import date

from .config import BookingConfig, get_booking_config, time_str_to_hour


def get_closing_hour(target_date: date | None, config: BookingConfig | None = None) -> int:
    """Closing hour (24h) for a date. No date → default closing hour."""
    config = config or get_booking_config()
    if target_date is None:
        return config.default_closing_hour
    return config.closing_hours.get(target_date.weekday(), config.default_closing_hour)


def default_slots(target_date: date | None = None, config: BookingConfig | None = None) -> list[str]:
    """
    Baseline candidate start times for a date.

    ["09:00", "12:00", "15:00"], plus "18:00" on Tuesday/Thursday.
    Insertion order, not sorted.
    """
    config = config or get_booking_config()
    slots = list(config.base_slots)
    if config.is_extended_day(target_date):
        slots.append(config.evening_slot)
    return slots


def is_slot_valid(time_str: str, duration_hours: int, closing_hour: int) -> bool:
    """True if the service finishes by closing time. Minutes are ignored."""
    return time_str_to_hour(time_str) + duration_hours <= closing_hour


def is_evening_time(
    time_str: str,
    target_date: date | None,
    config: BookingConfig | None = None,
) -> bool:
    """True for slots at/after the evening slot on Tuesday/Thursday."""
    config = config or get_booking_config()
    if not config.is_extended_day(target_date):
        return False
    return time_str_to_hour(time_str) >= config.evening_hour


def is_long_service_evening(
    time_str: str,
    target_date: date | None,
    duration_hours: int,
    config: BookingConfig | None = None,
) -> bool:
    """Long services are never offered an evening start."""
    config = config or get_booking_config()
    return (
        duration_hours == config.long_service_hours
        and is_evening_time(time_str, target_date, config)
    )

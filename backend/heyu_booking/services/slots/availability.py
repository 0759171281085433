# backend/heyu_booking/services/slots/availability.py
"""
Service availability calculation.

Calculates bookable start times for a service on a specific day.
Uses set[str] of "HH:MM" time strings.

Takes into account:
- Business hours of the weekday (closing hour)
- Service duration (must finish before closing)
- Existing bookings on the date (no overlap)
- Admin blocks (full day or specific times)
- Evening rule for long services on Tuesday/Thursday

Pure function of its inputs: callers load bookings and blocks first.
"""

from datetime import date
from typing import Iterable

from .blocks import DayBlock, is_day_blocked, is_slot_blocked
from .calculator import get_closing_hour, is_long_service_evening, is_slot_valid
from .config import (
    BookingConfig,
    get_booking_config,
    hour_to_time_str,
    normalize_date_str,
    parse_date,
    time_str_to_hour,
)
from .conflicts import BookedInterval, bookings_on_date, is_slot_booked
from .duration import resolve_service_duration


def compute_available_slots(
    target_date: str | date | None,
    service,
    bookings: Iterable[BookedInterval] | None,
    blocked_dates: Iterable[DayBlock] | None,
    config: BookingConfig | None = None,
) -> list[str]:
    """
    Calculate available start times for a service on a date.

    Returns:
        Sorted list of distinct "HH:MM" strings. Empty list = nothing bookable.
    """
    config = config or get_booking_config()

    # Step 1: A service must be selected
    if service is None:
        return []

    date_str = normalize_date_str(target_date)
    day = parse_date(target_date)
    blocked_dates = list(blocked_dates or ())

    # Step 2: Whole day blocked
    if is_day_blocked(date_str, blocked_dates):
        return []

    # Step 3: Bookings on this date only
    day_bookings = bookings_on_date(bookings or (), date_str) if date_str else []

    # Step 4: Duration and business hours
    duration = resolve_service_duration(service, config.default_duration_hours)
    closing_hour = get_closing_hour(day, config)

    base_slots = list(config.base_slots)
    evening_slot = config.evening_slot
    offers_evening = (
        config.is_extended_day(day)
        and duration == config.evening_slot_duration_hours
    )

    def admissible(time_str: str) -> bool:
        return (
            is_slot_valid(time_str, duration, closing_hour)
            and not is_slot_booked(time_str, day_bookings, duration)
            and not is_slot_blocked(time_str, date_str, blocked_dates)
        )

    slots: set[str] = set()

    # Step 5: No bookings → default grid
    if not day_bookings:
        slots.update(t for t in base_slots if admissible(t))
        if offers_evening and admissible(evening_slot):
            slots.add(evening_slot)
        return sorted(slots)

    # Step 6: Default grid minus conflicts
    slots.update(t for t in base_slots if admissible(t))
    if offers_evening and admissible(evening_slot):
        slots.add(evening_slot)

    # Step 7: Slots around each booking
    for booking in day_bookings:
        if booking.start_hour is None:
            continue

        booking_start = booking.start_hour
        booking_end = booking.end_hour

        # Default slots that finish before the booking starts
        for time_str in base_slots:
            if time_str_to_hour(time_str) + duration <= booking_start and admissible(time_str):
                slots.add(time_str)

        # Right after the booking ends
        next_time = hour_to_time_str(booking_end)
        if admissible(next_time) and not is_long_service_evening(next_time, day, duration, config):
            slots.add(next_time)

        # Default slots after the booking ends
        for time_str in base_slots:
            if time_str_to_hour(time_str) >= booking_end and admissible(time_str):
                slots.add(time_str)

    # Step 8: Final pass, every rule re-checked on the whole set
    final = [
        time_str
        for time_str in slots
        if not is_slot_blocked(time_str, date_str, blocked_dates)
        and not is_slot_booked(time_str, day_bookings, duration)
        and not is_long_service_evening(time_str, day, duration, config)
        and is_slot_valid(time_str, duration, closing_hour)
    ]

    return sorted(final)


def is_time_available(
    target_date: str | date | None,
    time_str: str,
    service,
    bookings: Iterable[BookedInterval] | None,
    blocked_dates: Iterable[DayBlock] | None,
    config: BookingConfig | None = None,
) -> bool:
    """True if time_str is among the available slots for the date."""
    return time_str in compute_available_slots(
        target_date, service, bookings, blocked_dates, config
    )

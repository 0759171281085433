"""
Normalization of stored records into engine inputs.

Legacy booking payloads used several field names for the same thing
(selectedTime / time / startTime, service.duration / duration). They are
resolved here once, when a record is loaded or imported, so the
availability engine only ever sees BookedInterval / DayBlock values.
"""

import json
import logging
from typing import Any, Optional

from ..models.tables import BlockedDates as DBBlockedDates, Bookings as DBBookings
from .slots.blocks import DayBlock, block_from_record
from .slots.config import normalize_date_str
from .slots.conflicts import BookedInterval
from .slots.duration import DEFAULT_DURATION_HOURS, parse_duration, resolve_service_duration

logger = logging.getLogger(__name__)

_TIME_FIELDS = ("selectedTime", "selected_time", "time", "startTime", "start_time")
_DATE_FIELDS = ("selectedDate", "selected_date", "date")


def _first(record: dict, fields: tuple[str, ...]) -> Any:
    for field in fields:
        value = record.get(field)
        if value:
            return value
    return None


def parse_start_hour(time_value) -> Optional[int]:
    """Hour of an "HH:MM" string, None when missing or unparsable."""
    if not time_value:
        return None
    try:
        return int(str(time_value).split(":")[0])
    except ValueError:
        return None


def normalize_time_str(time_value) -> Optional[str]:
    """"9:00" / "9" → "09:00". None when unparsable."""
    hour = parse_start_hour(time_value)
    if hour is None:
        return None
    parts = str(time_value).split(":")
    minute = parts[1][:2] if len(parts) > 1 and parts[1][:2].isdigit() else "00"
    return f"{hour:02d}:{minute}"


def booking_duration_from_record(record: dict) -> int:
    """Booking duration in hours: embedded service first, then top-level fields."""
    service = record.get("service")
    if isinstance(service, dict) and (
        service.get("duration") or service.get("duration_hours") or service.get("durationHours")
    ):
        return resolve_service_duration(service)

    hours = record.get("duration_hours", record.get("durationHours"))
    if isinstance(hours, int) and not isinstance(hours, bool) and hours > 0:
        return hours
    return parse_duration(record.get("duration"), DEFAULT_DURATION_HOURS)


def normalize_booking_record(record: dict) -> dict:
    """
    Canonical booking fields from a (possibly legacy) payload.

    Returns a dict with selected_date, selected_time, duration_hours and
    the service snapshot. selected_time may be None.
    """
    service = record.get("service")
    if not isinstance(service, dict):
        service = {}

    return {
        "selected_date": normalize_date_str(_first(record, _DATE_FIELDS)),
        "selected_time": normalize_time_str(_first(record, _TIME_FIELDS)),
        "duration_hours": booking_duration_from_record(record),
        "service": service,
    }


def interval_from_record(record: dict) -> BookedInterval:
    normalized = normalize_booking_record(record)
    return BookedInterval(
        date=normalized["selected_date"] or "",
        start_hour=parse_start_hour(normalized["selected_time"]),
        duration_hours=normalized["duration_hours"],
    )


def interval_from_row(row: DBBookings) -> BookedInterval:
    return BookedInterval(
        date=normalize_date_str(row.selected_date) or "",
        start_hour=parse_start_hour(row.selected_time),
        duration_hours=row.duration_hours or DEFAULT_DURATION_HOURS,
    )


def block_from_row(row: DBBlockedDates) -> Optional[DayBlock]:
    """DayBlock for a stored row. Unparsable rows are skipped (None)."""
    try:
        times = json.loads(row.times) if row.times else []
    except json.JSONDecodeError:
        logger.warning(f"Skipping blocked date {row.date}: bad times payload")
        return None
    if not isinstance(times, list):
        logger.warning(f"Skipping blocked date {row.date}: times is not a list")
        return None
    return block_from_record(row.date, times)

# backend/heyu_booking/services/slots/conflicts.py
"""
Conflict detection against existing bookings.

Bookings arrive already normalized (see services/ingest.py), so every
interval carries an integer start hour and duration.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from .config import time_str_to_hour


@dataclass(frozen=True)
class BookedInterval:
    """
    Hour interval [start_hour, start_hour + duration_hours) on date.

    start_hour is None when the stored booking had no usable time;
    such bookings never conflict.
    """
    date: str
    start_hour: Optional[int]
    duration_hours: int

    @property
    def end_hour(self) -> Optional[int]:
        if self.start_hour is None:
            return None
        return self.start_hour + self.duration_hours


def overlaps(start: int, end: int, other_start: int, other_end: int) -> bool:
    """Half-open interval intersection; touching endpoints don't overlap."""
    return start < other_end and end > other_start


def is_slot_booked(
    time_str: str,
    bookings: Iterable[BookedInterval],
    duration_hours: int,
) -> bool:
    """True if [time, time + duration) overlaps any booking."""
    start = time_str_to_hour(time_str)
    end = start + duration_hours

    for booking in bookings:
        if booking.start_hour is None:
            continue
        if overlaps(start, end, booking.start_hour, booking.end_hour):
            return True
    return False


def bookings_on_date(bookings: Iterable[BookedInterval], date_str: str) -> list[BookedInterval]:
    """Bookings whose date matches date_str ("YYYY-MM-DD")."""
    return [b for b in bookings if b.date.split("T")[0] == date_str]

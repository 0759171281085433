# backend/heyu_booking/services/slots/config.py
"""
Booking configuration for slots calculation.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from functools import lru_cache

from fastapi import Depends

from ...config import Settings, get_settings, settings


TUESDAY = 1
THURSDAY = 3


def _default_closing_hours() -> dict[int, int]:
    # Tuesday and Thursday stay open late
    return {TUESDAY: 22, THURSDAY: 22}


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for the availability engine.

    Attributes:
        base_slots: Start times offered every day
        evening_slot: Extra start time offered on extended days
        extended_weekdays: Weekdays (0 = Monday) that get the evening slot
        default_closing_hour: Closing hour when a date has no override
        closing_hours: Weekday → closing hour overrides
        default_duration_hours: Fallback when a duration can't be parsed
        evening_slot_duration_hours: Only services this long get the evening slot
        long_service_hours: Services this long never start in the evening
    """
    base_slots: tuple[str, ...] = ("09:00", "12:00", "15:00")
    evening_slot: str = "18:00"
    extended_weekdays: frozenset[int] = frozenset({TUESDAY, THURSDAY})
    default_closing_hour: int = 19
    closing_hours: dict[int, int] = field(default_factory=_default_closing_hours)
    default_duration_hours: int = 3
    evening_slot_duration_hours: int = 3
    long_service_hours: int = 5

    def __post_init__(self):
        """Validate configuration."""
        for weekday, hour in self.closing_hours.items():
            if not 0 <= weekday <= 6:
                raise ValueError(f"closing_hours weekday must be 0..6, got {weekday}")
            if not 0 < hour <= 24:
                raise ValueError(f"closing hour must be 1..24, got {hour}")

    @property
    def evening_hour(self) -> int:
        return time_str_to_hour(self.evening_slot)

    def is_extended_day(self, target_date: date | None) -> bool:
        if target_date is None:
            return False
        return target_date.weekday() in self.extended_weekdays


def booking_config_from_settings(cfg: Settings) -> BookingConfig:
    """Build the engine configuration for one Settings instance."""
    if cfg.closing_hours:
        return BookingConfig(closing_hours=dict(cfg.closing_hours))
    return BookingConfig()


@lru_cache
def get_booking_config() -> BookingConfig:
    """
    Get booking configuration for the process-wide settings (singleton).

    Closing hours can be overridden via HEYU_CLOSING_HOURS.
    """
    return booking_config_from_settings(settings)


# Dependency for FastAPI
def get_request_booking_config(cfg: Settings = Depends(get_settings)) -> BookingConfig:
    return booking_config_from_settings(cfg)


# ── Time helpers ─────────────────────────────────────────────────────────


def time_str_to_hour(time_str: str) -> int:
    """"HH:MM" → hour. Minutes are ignored."""
    return int(time_str.split(":")[0])


def hour_to_time_str(hour: int) -> str:
    """hour → "HH:00"."""
    return f"{hour:02d}:00"


def normalize_date_str(value) -> str | None:
    """
    Reduce a date / datetime / ISO string to "YYYY-MM-DD".

    Returns None for empty input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).split("T")[0].strip()


def parse_date(value) -> date | None:
    """Parse a date-like value, None when absent or malformed."""
    date_str = normalize_date_str(value)
    if not date_str:
        return None
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        return None

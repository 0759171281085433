# backend/heyu_booking/services/slots/duration.py
"""
Service duration parsing.

Durations are free text entered by the admin ("3小时", "5 hours").
The leading integer before the hour marker wins; anything else falls
back to the default so availability never fails on bad input.
"""

import re

DEFAULT_DURATION_HOURS = 3

_HOURS_CN = re.compile(r"(\d+)\s*小时")
_HOURS_EN = re.compile(r"(\d+)\s*(?:hours?|hrs?|h)\b", re.IGNORECASE)


def parse_duration(duration: str | None, default: int = DEFAULT_DURATION_HOURS) -> int:
    """Extract the hour count from a duration string."""
    if not duration:
        return default

    text = str(duration)
    match = _HOURS_CN.search(text) or _HOURS_EN.search(text)
    if not match:
        return default
    return int(match.group(1))


def resolve_service_duration(service, default: int = DEFAULT_DURATION_HOURS) -> int:
    """
    Duration in hours for a service object or dict.

    Prefers the structured hour count, then the display strings.
    """
    if service is None:
        return default

    if isinstance(service, dict):
        hours = service.get("duration_hours", service.get("durationHours"))
        texts = (service.get("duration"), service.get("duration_en", service.get("durationEn")))
    else:
        hours = getattr(service, "duration_hours", None)
        texts = (getattr(service, "duration", None), getattr(service, "duration_en", None))

    if isinstance(hours, int) and not isinstance(hours, bool) and hours > 0:
        return hours

    for text in texts:
        if text:
            return parse_duration(text, default)
    return default


_DURATION_FIELDS = ("duration", "durationHours", "duration_hours", "durationEn", "duration_en")


def has_duration(service: dict) -> bool:
    """True when a service snapshot carries any duration field."""
    return any(service.get(field) for field in _DURATION_FIELDS)

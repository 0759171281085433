# backend/heyu_booking/schemas/slots.py
"""
Pydantic schemas for time slots API.
"""

from typing import Any, Optional
from pydantic import BaseModel, Field

from .common import CAMEL_CONFIG


class AvailableSlotsRequest(BaseModel):
    """POST /available body. service needs duration/durationHours or an id."""
    date: Optional[str] = None
    service: Optional[dict[str, Any]] = None

    model_config = CAMEL_CONFIG


class TimeSlotsResponse(BaseModel):
    """Slots for a day, "HH:MM" sorted ascending."""
    success: bool = True
    date: str
    service: Optional[dict[str, Any]] = None
    time_slots: list[str] = Field(description='Start times, e.g. ["09:00", "12:00"]')

    model_config = CAMEL_CONFIG

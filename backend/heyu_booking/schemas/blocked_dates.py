# backend/heyu_booking/schemas/blocked_dates.py

from typing import Any, Optional
from pydantic import BaseModel

from .common import CAMEL_CONFIG


class BlockedDateIn(BaseModel):
    """times == [] blocks the whole day."""
    date: Optional[Any] = None
    times: Optional[Any] = None

    model_config = CAMEL_CONFIG


class BlockedDateRead(BaseModel):
    date: str
    times: list[str]
    full_day: bool

    model_config = CAMEL_CONFIG


class BlockedDateResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    blocked_date: Optional[BlockedDateRead] = None

    model_config = CAMEL_CONFIG


class BlockedDateListResponse(BaseModel):
    success: bool = True
    count: int
    blocked_dates: list[BlockedDateRead]

    model_config = CAMEL_CONFIG

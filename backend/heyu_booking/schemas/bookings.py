# backend/heyu_booking/schemas/bookings.py

from typing import Any, Optional
from pydantic import BaseModel, Field

from .common import CAMEL_CONFIG


class BookingCreate(BaseModel):
    """
    Customer booking submission.

    Fields are optional here; validate_booking_data() reports every
    missing/invalid field at once (400) instead of pydantic's first-error 422.
    """
    service: Optional[dict[str, Any]] = None
    selected_date: Optional[str] = None
    selected_time: Optional[str] = None
    name: Optional[str] = None
    wechat_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    wechat: Optional[str] = None

    model_config = CAMEL_CONFIG


class BookingRead(BaseModel):
    booking_id: str
    service: dict[str, Any] = Field(default_factory=dict)
    duration_hours: int
    selected_date: str
    selected_time: Optional[str] = None
    name: str
    wechat_name: str
    email: str
    phone: str
    wechat: str = ""
    status: str
    created_at: str

    model_config = CAMEL_CONFIG


class BookingResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    booking: BookingRead


class BookingListResponse(BaseModel):
    success: bool = True
    count: int
    bookings: list[BookingRead]

# backend/heyu_booking/routers/email.py
"""
Email diagnostics.

GET  /api/email/check             - SMTP configuration (secrets masked)
GET  /api/email/test?email=       - Send a sample confirmation
POST /api/email/send-confirmation - Resend for a stored booking or a full payload
"""

from datetime import date, datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..database import get_db
from ..models.tables import Bookings as DBBookings
from ..schemas.bookings import BookingRead
from ..services.bookings import booking_to_read
from ..services.mailer import send_confirmation_email, smtp_status


router = APIRouter(prefix="/api/email", tags=["email"])


def _sample_booking(recipient: str) -> BookingRead:
    return BookingRead(
        booking_id="TEST123",
        service={
            "nameCn": "测试服务",
            "nameEn": "Test Service",
            "duration": "3小时",
            "price": "$100",
        },
        duration_hours=3,
        selected_date=date.today().isoformat(),
        selected_time="14:00",
        name="Test User",
        wechat_name="TestUser",
        email=recipient,
        phone="1234567890",
        wechat="test_wechat",
        status="confirmed",
        created_at=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )


@router.get("/check")
def check_email_config(cfg: Settings = Depends(get_settings)):
    return {
        "success": True,
        "configured": cfg.smtp_configured,
        "config": smtp_status(cfg),
    }


@router.get("/test")
def send_test_email(
    email: Optional[str] = Query(None),
    cfg: Settings = Depends(get_settings),
):
    recipient = email or cfg.smtp_user
    if not recipient:
        raise HTTPException(
            status_code=400,
            detail="Email address is required (?email=...) or set SMTP user",
        )

    result = send_confirmation_email(_sample_booking(recipient), cfg)
    if not result.get("success"):
        return {"success": False, "message": "Failed to send test email", "result": result}
    return {"success": True, "message": f"Test email sent to {recipient}", "result": result}


@router.post("/send-confirmation")
def send_confirmation(
    payload: dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    cfg: Settings = Depends(get_settings),
):
    """Body: {"bookingId": ...} for a stored booking, or a full booking payload."""
    booking_id = payload.get("bookingId") or payload.get("booking_id")
    obj = None
    if booking_id:
        obj = db.query(DBBookings).filter(DBBookings.booking_id == booking_id).first()

    if obj is not None:
        booking = booking_to_read(obj)
    elif booking_id and set(payload) <= {"bookingId", "booking_id"}:
        raise HTTPException(status_code=404, detail="Booking not found")
    else:
        try:
            booking = BookingRead.model_validate(
                {"status": "confirmed", "createdAt": "", "durationHours": 3, **payload}
            )
        except ValidationError as e:
            raise HTTPException(
                status_code=400,
                detail={
                    "message": "Booking data is incomplete",
                    "errors": [err["msg"] for err in e.errors()],
                },
            )

    result = send_confirmation_email(booking, cfg)
    return {"success": bool(result.get("success")), "result": result}

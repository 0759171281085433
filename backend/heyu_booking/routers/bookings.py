# backend/heyu_booking/routers/bookings.py
# Bookings are immutable once created: no PATCH, DELETE only clears everything

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from redis import Redis
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..database import get_db
from ..models.tables import Bookings as DBBookings
from ..redis_client import get_redis
from ..schemas.bookings import (
    BookingCreate,
    BookingListResponse,
    BookingRead,
    BookingResponse,
)
from ..services.bookings import (
    BookingValidationError,
    SlotUnavailableError,
    booking_to_read,
    create_booking as create_booking_record,
)
from ..services.mailer import send_confirmation_email
from ..services.slots import BookingConfig, invalidate_availability_cache
from ..services.slots.config import get_request_booking_config

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


def send_booking_confirmation(booking: BookingRead, cfg: Settings) -> None:
    result = send_confirmation_email(booking, cfg)
    if not result.get("success"):
        logger.warning(f"Confirmation email not sent for {booking.booking_id}: {result}")


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    redis: Optional[Redis] = Depends(get_redis),
    cfg: Settings = Depends(get_settings),
    config: BookingConfig = Depends(get_request_booking_config),
):
    try:
        obj = create_booking_record(
            db,
            data,
            config=config,
            redis=redis,
            enforce_availability=cfg.enforce_slot_availability,
        )
    except BookingValidationError as e:
        raise HTTPException(
            status_code=400,
            detail={"message": "Data validation failed", "errors": e.errors},
        )
    except SlotUnavailableError as e:
        raise HTTPException(status_code=409, detail=str(e))

    booking = booking_to_read(obj)

    # Sent after the response; email failure never fails the booking
    background_tasks.add_task(send_booking_confirmation, booking, cfg)

    return BookingResponse(message="Booking created successfully", booking=booking)


@router.get("", response_model=BookingListResponse)
def list_bookings(
    status: Optional[str] = None,
    date: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """All bookings, newest first. Optional status/date filters."""
    query = db.query(DBBookings)
    if status:
        query = query.filter(DBBookings.status == status)
    if date:
        query = query.filter(DBBookings.selected_date == date.split("T")[0])

    rows = query.order_by(DBBookings.created_at.desc(), DBBookings.id.desc()).all()
    bookings = [booking_to_read(row) for row in rows]
    return BookingListResponse(count=len(bookings), bookings=bookings)


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(booking_id: str, db: Session = Depends(get_db)):
    obj = db.query(DBBookings).filter(DBBookings.booking_id == booking_id).first()
    if not obj:
        raise HTTPException(status_code=404, detail="Booking not found")
    return BookingResponse(booking=booking_to_read(obj))


@router.delete("")
def clear_bookings(
    db: Session = Depends(get_db),
    redis: Optional[Redis] = Depends(get_redis),
):
    """Delete every booking (admin maintenance)."""
    deleted = db.query(DBBookings).delete()
    db.commit()
    invalidate_availability_cache(redis)
    logger.info(f"Cleared {deleted} bookings")
    return {"success": True, "message": f"Cleared {deleted} bookings", "deleted": deleted}


@router.patch("/{booking_id}")
def patch_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )

# backend/heyu_booking/routers/blocked_dates.py
"""
Blocked dates API endpoints.

GET    /api/blocked-dates                     - All blocked dates
POST   /api/blocked-dates                     - Create/replace a date ([] = whole day)
DELETE /api/blocked-dates/{date}              - Remove the whole record
POST   /api/blocked-dates/{date}/times/{time} - Block one time
DELETE /api/blocked-dates/{date}/times/{time} - Unblock one time
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..redis_client import get_redis
from ..schemas.blocked_dates import (
    BlockedDateIn,
    BlockedDateListResponse,
    BlockedDateResponse,
)
from ..services.blocked_dates import (
    BlockedDateNotFound,
    block_time as block_single_time,
    block_to_read,
    delete_block,
    list_blocks,
    save_block_record,
    unblock_time as unblock_single_time,
    validate_blocked_date,
)
from ..services.ingest import normalize_time_str
from ..services.slots import BookingConfig
from ..services.slots.config import get_request_booking_config


router = APIRouter(prefix="/api/blocked-dates", tags=["blocked-dates"])


def _validated(date_str: str, time_str: Optional[str] = None) -> tuple[str, Optional[str]]:
    times = [] if time_str is None else [normalize_time_str(time_str) or time_str]
    errors = validate_blocked_date(date_str, times)
    if errors:
        raise HTTPException(
            status_code=400,
            detail={"message": "Data validation failed", "errors": errors},
        )
    return date_str, (times[0] if times else None)


@router.get("", response_model=BlockedDateListResponse)
def list_blocked_dates(db: Session = Depends(get_db)):
    blocked = [block_to_read(b) for b in list_blocks(db)]
    return BlockedDateListResponse(count=len(blocked), blocked_dates=blocked)


@router.post("", response_model=BlockedDateResponse)
def save_blocked_date(
    data: BlockedDateIn,
    db: Session = Depends(get_db),
    redis: Optional[Redis] = Depends(get_redis),
):
    times = data.times
    if isinstance(times, list):
        times = [(normalize_time_str(t) or t) if isinstance(t, str) else t for t in times]

    errors = validate_blocked_date(data.date, times)
    if errors:
        raise HTTPException(
            status_code=400,
            detail={"message": "Data validation failed", "errors": errors},
        )

    block = save_block_record(db, data.date, times, redis)
    return BlockedDateResponse(
        message="Blocked date saved successfully",
        blocked_date=block_to_read(block),
    )


@router.delete("/{date}", response_model=BlockedDateResponse)
def remove_blocked_date(
    date: str,
    db: Session = Depends(get_db),
    redis: Optional[Redis] = Depends(get_redis),
):
    try:
        delete_block(db, date, redis)
    except BlockedDateNotFound:
        raise HTTPException(status_code=404, detail="Blocked date not found")
    return BlockedDateResponse(message="Blocked date removed successfully")


@router.post("/{date}/times/{time}", response_model=BlockedDateResponse)
def block_time(
    date: str,
    time: str,
    db: Session = Depends(get_db),
    redis: Optional[Redis] = Depends(get_redis),
    config: BookingConfig = Depends(get_request_booking_config),
):
    date_str, time_str = _validated(date, time)
    block = block_single_time(db, date_str, time_str, redis, config)
    return BlockedDateResponse(
        message=f"Time {time_str} blocked",
        blocked_date=block_to_read(block),
    )


@router.delete("/{date}/times/{time}", response_model=BlockedDateResponse)
def unblock_time(
    date: str,
    time: str,
    db: Session = Depends(get_db),
    redis: Optional[Redis] = Depends(get_redis),
    config: BookingConfig = Depends(get_request_booking_config),
):
    """Full-day block → every other slot stays blocked."""
    date_str, time_str = _validated(date, time)
    try:
        block = unblock_single_time(db, date_str, time_str, redis, config)
    except BlockedDateNotFound:
        raise HTTPException(status_code=404, detail="Blocked date not found")

    if block is None:
        return BlockedDateResponse(message=f"Time {time_str} unblocked, date fully open")
    return BlockedDateResponse(
        message=f"Time {time_str} unblocked",
        blocked_date=block_to_read(block),
    )

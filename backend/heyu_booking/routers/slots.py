# backend/heyu_booking/routers/slots.py
"""
Time slots API endpoints.

GET  /api/time-slots/available - Available slots for a date + stored service
POST /api/time-slots/available - Available slots for a date + service object
GET  /api/time-slots/default   - Default grid for a date (no bookings/blocks)
"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from redis import Redis
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..database import get_db
from ..models.tables import Services as DBServices
from ..redis_client import get_redis
from ..schemas.services import ServiceRead
from ..schemas.slots import AvailableSlotsRequest, TimeSlotsResponse
from ..services.slots import BookingConfig, calculate_service_availability, default_slots
from ..services.slots.config import get_request_booking_config, normalize_date_str, parse_date
from ..services.slots.duration import has_duration


router = APIRouter(prefix="/api/time-slots", tags=["time-slots"])


def _require_date(value: Optional[str]) -> str:
    if not value:
        raise HTTPException(status_code=400, detail="Date parameter is required")
    if parse_date(value) is None:
        raise HTTPException(status_code=400, detail="Invalid date format, expected YYYY-MM-DD")
    return normalize_date_str(value)


def _get_service_or_404(db: Session, service_id: int) -> DBServices:
    obj = db.get(DBServices, service_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Service not found")
    return obj


@router.get("/available", response_model=TimeSlotsResponse)
def get_available_slots(
    target_date: Optional[str] = Query(None, alias="date"),
    service_id: Optional[int] = Query(None, alias="serviceId"),
    db: Session = Depends(get_db),
    redis: Optional[Redis] = Depends(get_redis),
    cfg: Settings = Depends(get_settings),
    config: BookingConfig = Depends(get_request_booking_config),
):
    """Available slots for a stored service; no service → default grid."""
    date_str = _require_date(target_date)
    if service_id is None:
        return TimeSlotsResponse(
            date=date_str,
            time_slots=default_slots(parse_date(date_str), config),
        )

    service = _get_service_or_404(db, service_id)
    slots = calculate_service_availability(
        db=db,
        target_date=date_str,
        service=service,
        config=config,
        redis=redis,
        cache_ttl=cfg.availability_cache_ttl,
    )

    return TimeSlotsResponse(
        date=date_str,
        service=ServiceRead.model_validate(service).model_dump(by_alias=True),
        time_slots=slots,
    )


@router.post("/available", response_model=TimeSlotsResponse)
def post_available_slots(
    data: AvailableSlotsRequest,
    db: Session = Depends(get_db),
    redis: Optional[Redis] = Depends(get_redis),
    cfg: Settings = Depends(get_settings),
    config: BookingConfig = Depends(get_request_booking_config),
):
    """Available slots for a service object (needs duration, or an id to look up)."""
    date_str = _require_date(data.date)

    if not data.service:
        raise HTTPException(
            status_code=400,
            detail="Service information is required (must include duration)",
        )

    service = data.service
    if not has_duration(service) and service.get("id") is not None:
        try:
            service_id = int(service["id"])
        except (TypeError, ValueError):
            raise HTTPException(status_code=400, detail="Invalid service id")
        service = ServiceRead.model_validate(_get_service_or_404(db, service_id)).model_dump(by_alias=True)

    slots = calculate_service_availability(
        db=db,
        target_date=date_str,
        service=service,
        config=config,
        redis=redis,
        cache_ttl=cfg.availability_cache_ttl,
    )

    return TimeSlotsResponse(date=date_str, service=service, time_slots=slots)


@router.get("/default", response_model=TimeSlotsResponse)
def get_default_slots(
    target_date: Optional[str] = Query(None, alias="date"),
    config: BookingConfig = Depends(get_request_booking_config),
):
    """Default grid for a date, ignoring bookings and blocks."""
    date_str = _require_date(target_date)
    return TimeSlotsResponse(
        date=date_str,
        time_slots=default_slots(parse_date(date_str), config),
    )

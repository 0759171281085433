"""
Booking creation and serialization.

Flow:
1. Validate the customer payload (all errors reported together)
2. Resolve id-only services, normalize date/time/duration once (services/ingest.py)
3. Optionally re-check availability under a per-date Redis lock
4. Insert, invalidate the date's availability cache
"""

import json
import logging
import re
import secrets
import string
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional

from redis import Redis
from redis.exceptions import LockError, RedisError
from sqlalchemy.orm import Session

from ..models.tables import Bookings as DBBookings, Services as DBServices
from ..schemas.bookings import BookingCreate, BookingRead
from ..schemas.services import ServiceRead
from .ingest import normalize_booking_record
from .slots import BookingConfig, calculate_service_availability, invalidate_availability_cache
from .slots.config import parse_date
from .slots.duration import has_duration

logger = logging.getLogger(__name__)

BOOKING_LOCK_PREFIX = "booking_lock"
BOOKING_LOCK_TTL = 10  # seconds
BOOKING_LOCK_WAIT = 5  # seconds

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^[\d\s\-+()]+$")
TIME_RE = re.compile(r"^([01]?\d|2[0-3]):[0-5]\d$")

_ID_ALPHABET = string.digits + string.ascii_lowercase


class BookingValidationError(ValueError):
    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


class SlotUnavailableError(Exception):
    """Requested time is no longer available."""


def generate_booking_id() -> str:
    """BK + millisecond timestamp + 9 random base36 chars."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"BK{int(time.time() * 1000)}{suffix}"


def _blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


def validate_booking_data(data: BookingCreate) -> list[str]:
    """Return a list of human-readable errors; empty list = valid."""
    errors = []

    if not data.service or not data.service.get("id"):
        errors.append("Service information is required")

    if not data.selected_date:
        errors.append("Date is required")
    elif parse_date(data.selected_date) is None:
        errors.append("Invalid date format, expected YYYY-MM-DD")

    if not data.selected_time:
        errors.append("Time is required")
    elif not TIME_RE.match(data.selected_time.strip()):
        errors.append("Invalid time format, expected HH:MM")

    if _blank(data.name):
        errors.append("Name is required")

    if _blank(data.wechat_name):
        errors.append("WeChat name is required")

    if _blank(data.email):
        errors.append("Email address is required")
    elif not EMAIL_RE.match(data.email.strip()):
        errors.append("Invalid email address")

    if _blank(data.phone):
        errors.append("Phone number is required")
    else:
        digits_only = re.sub(r"\D", "", data.phone)
        if not PHONE_RE.match(data.phone.strip()) or len(digits_only) < 8:
            errors.append("Invalid phone number")

    return errors


def resolve_service_snapshot(db: Session, service: dict) -> dict:
    """
    Service snapshot stored with the booking.

    A snapshot without any duration field is replaced by the stored
    service, so the booking holds the real duration instead of the default.

    Raises:
        BookingValidationError: id unknown or service deactivated
    """
    if has_duration(service):
        return service

    try:
        service_id = int(service["id"])
    except (TypeError, ValueError):
        raise BookingValidationError(["Invalid service id"])

    row = db.get(DBServices, service_id)
    if row is None or not row.is_active:
        raise BookingValidationError(["Service not found"])
    return ServiceRead.model_validate(row).model_dump(by_alias=True)


@contextmanager
def booking_lock(redis: Optional[Redis], date_str: str):
    """
    Serialize booking creation per date.

    No Redis → no lock (single-process deployments).
    """
    if redis is None:
        yield
        return

    lock = redis.lock(
        f"{BOOKING_LOCK_PREFIX}:{date_str}",
        timeout=BOOKING_LOCK_TTL,
        blocking_timeout=BOOKING_LOCK_WAIT,
    )
    try:
        acquired = lock.acquire()
    except RedisError:
        logger.exception("Booking lock unavailable for %s, continuing without it", date_str)
        yield
        return

    if not acquired:
        raise SlotUnavailableError(f"Bookings for {date_str} are busy, please retry")

    try:
        yield
    finally:
        try:
            lock.release()
        except LockError:
            logger.warning(f"Booking lock for {date_str} expired before release")


def create_booking(
    db: Session,
    data: BookingCreate,
    config: Optional[BookingConfig] = None,
    redis: Optional[Redis] = None,
    enforce_availability: bool = False,
) -> DBBookings:
    """
    Validate and store a booking.

    Raises:
        BookingValidationError: payload invalid
        SlotUnavailableError: enforce_availability and the slot is taken
    """
    errors = validate_booking_data(data)
    if errors:
        raise BookingValidationError(errors)

    service = resolve_service_snapshot(db, data.service)
    normalized = normalize_booking_record({
        "service": service,
        "selectedDate": data.selected_date,
        "selectedTime": data.selected_time.strip(),
    })
    date_str = normalized["selected_date"]

    if not enforce_availability:
        obj = _insert_booking(db, data, normalized)
    else:
        with booking_lock(redis, date_str):
            # Fresh computation, never the cache
            available = calculate_service_availability(db, date_str, service, config)
            if normalized["selected_time"] not in available:
                raise SlotUnavailableError(
                    f"{date_str} {normalized['selected_time']} is no longer available"
                )
            obj = _insert_booking(db, data, normalized)

    invalidate_availability_cache(redis, [date_str])
    logger.info(f"Booking created: {obj.booking_id} on {date_str} {obj.selected_time}")
    return obj


def _insert_booking(db: Session, data: BookingCreate, normalized: dict) -> DBBookings:
    created_at = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

    obj = DBBookings(
        booking_id=generate_booking_id(),
        service=json.dumps(normalized["service"], ensure_ascii=False),
        duration_hours=normalized["duration_hours"],
        selected_date=normalized["selected_date"],
        selected_time=normalized["selected_time"],
        name=data.name.strip(),
        wechat_name=data.wechat_name.strip(),
        email=data.email.strip(),
        phone=data.phone.strip(),
        wechat=data.wechat.strip() if data.wechat else "",
        status="confirmed",
        created_at=created_at,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def booking_to_read(row: DBBookings) -> BookingRead:
    try:
        service = json.loads(row.service) if row.service else {}
    except json.JSONDecodeError:
        service = {}

    return BookingRead(
        booking_id=row.booking_id,
        service=service if isinstance(service, dict) else {},
        duration_hours=row.duration_hours,
        selected_date=row.selected_date,
        selected_time=row.selected_time,
        name=row.name,
        wechat_name=row.wechat_name,
        email=row.email,
        phone=row.phone,
        wechat=row.wechat or "",
        status=row.status,
        created_at=row.created_at,
    )

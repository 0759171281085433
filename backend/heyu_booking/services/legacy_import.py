"""
Import of the legacy JSON data files.

    services.json      {"services": [...]}
    bookings.json      {"bookings": [...]}
    blockedDates.json  {"blockedDates": [...]}

Booking records go through normalize_booking_record so legacy field
names (time / startTime, top-level duration) land in canonical columns.
Existing rows are updated in place; running the import twice is harmless.
"""

import json
import logging
from pathlib import Path

from sqlalchemy.orm import Session

from ..models.tables import (
    BlockedDates as DBBlockedDates,
    Bookings as DBBookings,
    Services as DBServices,
)
from .bookings import generate_booking_id
from .ingest import normalize_booking_record, normalize_time_str
from .slots import parse_duration
from .slots.config import normalize_date_str

logger = logging.getLogger(__name__)

SERVICES_FILE = "services.json"
BOOKINGS_FILE = "bookings.json"
BLOCKED_DATES_FILE = "blockedDates.json"

_SERVICE_FIELDS = {
    "nameCn": "name_cn",
    "nameEn": "name_en",
    "category": "category",
    "duration": "duration",
    "durationEn": "duration_en",
    "price": "price",
    "description": "description",
    "descriptionCn": "description_cn",
}


def read_legacy_file(path: Path, key: str) -> list[dict]:
    """Records under key, [] when the file is missing."""
    if not path.exists():
        logger.info(f"{path.name} not found, skipping")
        return []
    data = json.loads(path.read_text(encoding="utf-8"))
    records = data.get(key) if isinstance(data, dict) else data
    return [r for r in records or [] if isinstance(r, dict)]


def import_services(db: Session, records: list[dict]) -> int:
    count = 0
    for record in records:
        try:
            service_id = int(record["id"])
        except (KeyError, TypeError, ValueError):
            logger.warning(f"Skipping service without id: {record}")
            continue

        obj = db.get(DBServices, service_id)
        if obj is None:
            obj = DBServices(id=service_id)
            db.add(obj)

        for legacy, column in _SERVICE_FIELDS.items():
            value = record.get(legacy, record.get(column))
            if value is not None:
                setattr(obj, column, str(value))
        obj.is_add_on = int(bool(record.get("isAddOn", record.get("is_add_on", False))))
        obj.is_active = 1
        obj.duration_hours = parse_duration(obj.duration or obj.duration_en)
        count += 1

    db.commit()
    return count


def import_bookings(db: Session, records: list[dict]) -> int:
    count = 0
    for record in records:
        normalized = normalize_booking_record(record)
        if not normalized["selected_date"]:
            logger.warning(f"Skipping booking without date: {record.get('bookingId')}")
            continue

        booking_id = record.get("bookingId") or record.get("id") or generate_booking_id()
        obj = db.query(DBBookings).filter(DBBookings.booking_id == str(booking_id)).first()
        if obj is None:
            obj = DBBookings(booking_id=str(booking_id))
            db.add(obj)

        obj.service = json.dumps(normalized["service"], ensure_ascii=False)
        obj.duration_hours = normalized["duration_hours"]
        obj.selected_date = normalized["selected_date"]
        obj.selected_time = normalized["selected_time"]
        obj.name = record.get("name") or ""
        obj.wechat_name = record.get("wechatName") or ""
        obj.email = record.get("email") or ""
        obj.phone = record.get("phone") or ""
        obj.wechat = record.get("wechat") or ""
        obj.status = record.get("status") or "confirmed"
        obj.created_at = record.get("createdAt") or ""
        count += 1

    db.commit()
    return count


def import_blocked_dates(db: Session, records: list[dict]) -> int:
    count = 0
    for record in records:
        date_str = normalize_date_str(record.get("date"))
        if not date_str:
            continue

        times = sorted({
            normalize_time_str(t) for t in record.get("times") or [] if normalize_time_str(t)
        })
        obj = db.get(DBBlockedDates, date_str)
        if obj is None:
            obj = DBBlockedDates(date=date_str)
            db.add(obj)
        obj.times = json.dumps(times)
        count += 1

    db.commit()
    return count


def import_legacy_dir(db: Session, data_dir: Path) -> dict[str, int]:
    """Import every legacy file found in data_dir."""
    data_dir = Path(data_dir)
    result = {
        "services": import_services(db, read_legacy_file(data_dir / SERVICES_FILE, "services")),
        "bookings": import_bookings(db, read_legacy_file(data_dir / BOOKINGS_FILE, "bookings")),
        "blocked_dates": import_blocked_dates(
            db, read_legacy_file(data_dir / BLOCKED_DATES_FILE, "blockedDates")
        ),
    }
    logger.info(f"Legacy import finished: {result}")
    return result

"""
Admin operations on blocked dates.

Rows store {"date", "times"} with '[]' meaning the whole day; all logic
goes through the FullDayBlock / PartialBlock types in slots/blocks.py.
"""

import json
import logging
import re
from typing import Optional

from redis import Redis
from sqlalchemy.orm import Session

from ..models.tables import BlockedDates as DBBlockedDates
from ..schemas.blocked_dates import BlockedDateRead
from .ingest import block_from_row
from .slots import BookingConfig, default_slots, get_booking_config, invalidate_availability_cache
from .slots.blocks import (
    DayBlock,
    FullDayBlock,
    add_blocked_time,
    block_from_record,
    remove_blocked_time,
)
from .slots.config import parse_date

logger = logging.getLogger(__name__)

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^([0-1][0-9]|2[0-3]):[0-5][0-9]$")


class BlockedDateNotFound(LookupError):
    pass


def validate_blocked_date(date_value, times_value) -> list[str]:
    errors = []

    if not date_value or not isinstance(date_value, str):
        errors.append("Date is required and must be a string")
    elif not DATE_RE.match(date_value) or parse_date(date_value) is None:
        errors.append("Invalid date format, expected YYYY-MM-DD")

    if not isinstance(times_value, list):
        errors.append("Times must be a list")
    else:
        invalid = [t for t in times_value if not isinstance(t, str) or not TIME_RE.match(t)]
        if invalid:
            errors.append(f"Invalid time format: {', '.join(str(t) for t in invalid)}")

    return errors


def block_to_read(block: DayBlock) -> BlockedDateRead:
    return BlockedDateRead(
        date=block.date,
        times=block.times,
        full_day=isinstance(block, FullDayBlock),
    )


def all_slots_for_date(date_str: str, config: Optional[BookingConfig] = None) -> list[str]:
    """Every slot the admin can block on a date (default grid)."""
    return sorted(default_slots(parse_date(date_str), config))


# ── Queries ──────────────────────────────────────────────────────────────


def list_blocks(db: Session) -> list[DayBlock]:
    rows = db.query(DBBlockedDates).order_by(DBBlockedDates.date).all()
    blocks = [block_from_row(row) for row in rows]
    return [b for b in blocks if b is not None]


def get_block(db: Session, date_str: str) -> Optional[DayBlock]:
    row = db.get(DBBlockedDates, date_str)
    if row is None:
        return None
    return block_from_row(row)


# ── Mutations ────────────────────────────────────────────────────────────


def save_block(db: Session, block: DayBlock, redis: Optional[Redis] = None) -> DayBlock:
    """Create or replace the record for block.date."""
    row = db.get(DBBlockedDates, block.date)
    times_json = json.dumps(block.times)
    if row is None:
        db.add(DBBlockedDates(date=block.date, times=times_json))
    else:
        row.times = times_json
    db.commit()

    invalidate_availability_cache(redis, [block.date])
    logger.info(f"Blocked date saved: {block.date} times={block.times or 'all day'}")
    return block


def save_block_record(
    db: Session,
    date_str: str,
    times: list[str],
    redis: Optional[Redis] = None,
) -> DayBlock:
    return save_block(db, block_from_record(date_str, times), redis)


def delete_block(db: Session, date_str: str, redis: Optional[Redis] = None) -> None:
    row = db.get(DBBlockedDates, date_str)
    if row is None:
        raise BlockedDateNotFound(date_str)
    db.delete(row)
    db.commit()

    invalidate_availability_cache(redis, [date_str])
    logger.info(f"Blocked date removed: {date_str}")


def block_time(
    db: Session,
    date_str: str,
    time_str: str,
    redis: Optional[Redis] = None,
    config: Optional[BookingConfig] = None,
) -> DayBlock:
    """Block one time; collapses to a full-day block once every slot is blocked."""
    config = config or get_booking_config()
    current = get_block(db, date_str)
    updated = add_blocked_time(current, date_str, time_str, all_slots_for_date(date_str, config))
    if updated == current:
        return current
    return save_block(db, updated, redis)


def unblock_time(
    db: Session,
    date_str: str,
    time_str: str,
    redis: Optional[Redis] = None,
    config: Optional[BookingConfig] = None,
) -> Optional[DayBlock]:
    """
    Unblock one time.

    Full-day block → partial block of every other default slot.
    Last remaining time removed → record deleted, returns None.

    Raises:
        BlockedDateNotFound: no record for date
    """
    config = config or get_booking_config()
    current = get_block(db, date_str)
    if current is None:
        raise BlockedDateNotFound(date_str)
    if not current.blocks(time_str):
        return current

    updated = remove_blocked_time(current, time_str, all_slots_for_date(date_str, config))
    if updated is None:
        delete_block(db, date_str, redis)
        return None
    return save_block(db, updated, redis)

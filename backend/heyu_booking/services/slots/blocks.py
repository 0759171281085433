# backend/heyu_booking/services/slots/blocks.py
"""
Admin blocks for dates and times.

Stored form: {"date": "YYYY-MM-DD", "times": ["HH:MM", ...]}
where an empty times list means the whole day is blocked.

In memory the two cases are separate types so an empty partial block
can never be mistaken for a full-day block:

    FullDayBlock(date)
    PartialBlock(date, times)   # times is never empty
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Union

from .config import normalize_date_str


@dataclass(frozen=True)
class FullDayBlock:
    date: str

    def blocks(self, time_str: str) -> bool:
        return True

    @property
    def times(self) -> list[str]:
        return []


@dataclass(frozen=True)
class PartialBlock:
    date: str
    blocked_times: frozenset[str]

    def __post_init__(self):
        if not self.blocked_times:
            raise ValueError(f"PartialBlock for {self.date} needs at least one time")

    def blocks(self, time_str: str) -> bool:
        return time_str in self.blocked_times

    @property
    def times(self) -> list[str]:
        return sorted(self.blocked_times)


DayBlock = Union[FullDayBlock, PartialBlock]


def block_from_record(date_str: str, times: Optional[Iterable[str]]) -> DayBlock:
    """Build a block from its stored form. Empty/missing times → full day."""
    date_str = normalize_date_str(date_str)
    times = frozenset(times or ())
    if not times:
        return FullDayBlock(date_str)
    return PartialBlock(date_str, times)


def block_to_record(block: DayBlock) -> dict:
    return {"date": block.date, "times": block.times}


def find_block(target_date, blocked_dates: Iterable[DayBlock]) -> Optional[DayBlock]:
    date_str = normalize_date_str(target_date)
    if not date_str:
        return None
    for block in blocked_dates:
        if block.date == date_str:
            return block
    return None


def is_slot_blocked(time_str: str, target_date, blocked_dates: Iterable[DayBlock]) -> bool:
    """True if time_str on target_date is blocked (full day or that time)."""
    block = find_block(target_date, blocked_dates)
    if block is None:
        return False
    return block.blocks(time_str)


def is_day_blocked(target_date, blocked_dates: Iterable[DayBlock]) -> bool:
    return isinstance(find_block(target_date, blocked_dates), FullDayBlock)


# ── Admin transitions ────────────────────────────────────────────────────


def add_blocked_time(
    block: Optional[DayBlock],
    date_str: str,
    time_str: str,
    all_slots: Iterable[str],
) -> DayBlock:
    """
    Block one more time on a date.

    A full-day block becomes a partial block of just this time.
    When every slot of the day ends up blocked, collapse to a full-day block.
    """
    all_slots = set(all_slots)

    if isinstance(block, PartialBlock):
        if time_str in block.blocked_times:
            return block
        times = block.blocked_times | {time_str}
    else:
        times = frozenset({time_str})

    if all_slots and all_slots <= times:
        return FullDayBlock(date_str)
    return PartialBlock(date_str, times)


def remove_blocked_time(
    block: DayBlock,
    time_str: str,
    all_slots: Iterable[str],
) -> Optional[DayBlock]:
    """
    Unblock one time.

    Full-day block → partial block of all slots except time_str.
    Returns None when nothing stays blocked (record should be deleted).
    """
    if isinstance(block, FullDayBlock):
        remaining = frozenset(all_slots) - {time_str}
    else:
        remaining = block.blocked_times - {time_str}

    if not remaining:
        return None
    return PartialBlock(block.date, remaining)

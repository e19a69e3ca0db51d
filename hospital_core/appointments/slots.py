# hospital_core/appointments/slots.py
"""
Fixed daily slot catalogue and the interval arithmetic around it.

Slots are `datetime.time` values. Text comes in as "HH:MM" (booking forms)
or "HH:MM:SS" (database/time-field form); both parse to the same value, so
comparisons never depend on the textual form.
"""
from __future__ import annotations

from datetime import time
from typing import Iterable

SLOT_MINUTES = 15
DAY_START = time(8, 0)
DAY_END = time(17, 0)  # exclusive

_MINUTES_PER_DAY = 24 * 60


def _to_minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def _from_minutes(total: int) -> time:
    total %= _MINUTES_PER_DAY
    return time(total // 60, total % 60)


def generate_slots() -> list[time]:
    """08:00, 08:15, ... 16:45 (36 slots)."""
    start, end = _to_minutes(DAY_START), _to_minutes(DAY_END)
    return [_from_minutes(m) for m in range(start, end, SLOT_MINUTES)]


def parse_slot(value: str | time) -> time:
    """
    Accepts a time, "HH:MM" or "HH:MM:SS". Raises ValueError otherwise.
    """
    if isinstance(value, time):
        return value.replace(microsecond=0, tzinfo=None)

    text = str(value).strip()
    parts = text.split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() and len(p) == 2 for p in parts):
        raise ValueError(f"Invalid slot time {value!r}; expected HH:MM or HH:MM:SS.")

    return time(*(int(p) for p in parts))


def format_slot(t: time, *, with_seconds: bool = False) -> str:
    return t.strftime("%H:%M:%S" if with_seconds else "%H:%M")


def slot_end(start: time) -> time:
    """
    start + 15 minutes with hour rollover. Not clamped to the end of the
    day: 16:50 -> 17:05, 23:50 -> 00:05.
    """
    return _from_minutes(_to_minutes(start) + SLOT_MINUTES)


def is_catalogue_slot(t: time) -> bool:
    return t.second == 0 and t in generate_slots()


def intervals_overlap(a_start: time, a_end: time, b_start: time, b_end: time) -> bool:
    """Half-open [start, end) overlap; touching intervals do not overlap."""
    return a_start < b_end and a_end > b_start


def first_free_slot(
    existing: Iterable[tuple[time, time]],
    *,
    exclude: Iterable[time] = (),
) -> time | None:
    """
    First catalogue slot whose [start, start+15) overlaps none of the
    existing intervals, skipping starts in `exclude`. None when the day is full.
    """
    taken = list(existing)
    skipped = set(exclude)

    for candidate in generate_slots():
        if candidate in skipped:
            continue
        end = slot_end(candidate)
        if not any(intervals_overlap(candidate, end, s, e) for s, e in taken):
            return candidate
    return None

# hospital_core/appointments/recurrence.py
from __future__ import annotations

import calendar
from datetime import date, timedelta
from enum import Enum


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


_FIXED_STEPS = {
    Frequency.DAILY: timedelta(days=1),
    Frequency.WEEKLY: timedelta(weeks=1),
    Frequency.BIWEEKLY: timedelta(weeks=2),
}


def add_months(anchor: date, months: int) -> date:
    """
    Same day-of-month `months` later, clamped to the last day of a short
    month (Jan 31 + 1 -> Feb 28/29).
    """
    index = anchor.month - 1 + months
    year = anchor.year + index // 12
    month = index % 12 + 1
    day = min(anchor.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def occurrence(start: date, frequency: Frequency, n: int) -> date:
    """
    n-th occurrence counted from the anchor date, so a clamped month does
    not drag later months (Jan 31 -> Feb 28 -> Mar 31 -> Apr 30).
    """
    if frequency is Frequency.MONTHLY:
        return add_months(start, n)
    return start + _FIXED_STEPS[frequency] * n


def recurring_dates(start: date, end: date, frequency: Frequency | str) -> list[date]:
    """
    Every occurrence from start up to and including end. Empty when end < start.
    """
    frequency = Frequency(frequency)

    dates: list[date] = []
    n = 0
    current = start
    while current <= end:
        dates.append(current)
        n += 1
        current = occurrence(start, frequency, n)
    return dates

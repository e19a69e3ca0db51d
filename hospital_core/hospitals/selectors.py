# hospital_core/hospitals/selectors.py
from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from uuid import UUID
from zoneinfo import ZoneInfo

from django.utils import timezone

from hospital_core.hospitals.models import Hospital


def get_hospital(*, hospital_id: UUID) -> Hospital:
    return Hospital.objects.get(id=hospital_id, is_active=True)


def hospital_tz(*, hospital_id: UUID) -> tzinfo:
    """
    The hospital's own clock (the project TIME_ZONE if the hospital row is unknown).
    """
    tz_name = Hospital.objects.filter(id=hospital_id).values_list("timezone", flat=True).first()
    if not tz_name:
        return timezone.get_default_timezone()
    return ZoneInfo(tz_name)


def hospital_today(*, hospital_id: UUID) -> date:
    return timezone.localdate(timezone=hospital_tz(hospital_id=hospital_id))


def hospital_day_bounds(*, hospital_id: UUID, on_date: date) -> tuple[datetime, datetime]:
    """
    [start, end) of on_date in the hospital's timezone, as aware datetimes.
    """
    tz = hospital_tz(hospital_id=hospital_id)
    start = datetime.combine(on_date, time.min, tzinfo=tz)
    end = datetime.combine(on_date + timedelta(days=1), time.min, tzinfo=tz)
    return start, end

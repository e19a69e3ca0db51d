# hospital_core/vitals/selectors.py
from __future__ import annotations

from datetime import date
from uuid import UUID

from django.db.models import QuerySet

from hospital_core.common.context import RequestContext
from hospital_core.hospitals.selectors import hospital_day_bounds
from hospital_core.vitals.models import VitalSigns


def get_vitals(*, ctx: RequestContext, vitals_id: UUID) -> VitalSigns:
    return VitalSigns.objects.select_related("patient").get(id=vitals_id, hospital_id=ctx.hospital_id)


def _on_hospital_day(qs: QuerySet[VitalSigns], *, ctx: RequestContext, on_date: date) -> QuerySet[VitalSigns]:
    start, end = hospital_day_bounds(hospital_id=ctx.hospital_id, on_date=on_date)
    return qs.filter(recorded_at__gte=start, recorded_at__lt=end)


def fetch_vitals_for_date(*, ctx: RequestContext, on_date: date) -> QuerySet[VitalSigns]:
    """
    All of the day's records, oldest first (recorded_at, created_at, id).
    The day is the hospital's calendar day, not the server's.
    """
    qs = VitalSigns.objects.select_related("patient").filter(hospital_id=ctx.hospital_id)
    return _on_hospital_day(qs, ctx=ctx, on_date=on_date).order_by("recorded_at", "created_at", "id")


def list_vitals(
    *,
    ctx: RequestContext,
    patient_id: UUID | None = None,
    on_date: date | None = None,
) -> QuerySet[VitalSigns]:
    qs = VitalSigns.objects.select_related("patient").filter(hospital_id=ctx.hospital_id)
    if patient_id is not None:
        qs = qs.filter(patient_id=patient_id)
    if on_date is not None:
        qs = _on_hospital_day(qs, ctx=ctx, on_date=on_date)
    return qs.order_by("-recorded_at", "-created_at")

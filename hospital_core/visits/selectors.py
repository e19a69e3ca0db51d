# hospital_core/visits/selectors.py
from __future__ import annotations

from datetime import date
from uuid import UUID

from django.db.models import QuerySet

from hospital_core.common.context import RequestContext
from hospital_core.visits.models import Visit


def get_visit(*, ctx: RequestContext, visit_id: UUID) -> Visit:
    return Visit.objects.select_related("patient", "appointment").get(id=visit_id, hospital_id=ctx.hospital_id)


def list_visits(
    *,
    ctx: RequestContext,
    patient_id: UUID | None = None,
    on_date: date | None = None,
) -> QuerySet[Visit]:
    qs = Visit.objects.select_related("patient").filter(hospital_id=ctx.hospital_id)
    if patient_id is not None:
        qs = qs.filter(patient_id=patient_id)
    if on_date is not None:
        qs = qs.filter(visit_date=on_date)
    return qs.order_by("-visit_date", "-created_at")


def visited_patient_ids(*, ctx: RequestContext, on_date: date) -> set[UUID]:
    """Patients already seen by a doctor that day."""
    return set(
        Visit.objects.filter(hospital_id=ctx.hospital_id, visit_date=on_date).values_list("patient_id", flat=True)
    )

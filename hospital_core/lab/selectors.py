# hospital_core/lab/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import QuerySet

from hospital_core.common.context import RequestContext
from hospital_core.lab.models import LabOrder, LabTestType


def list_test_types(*, ctx: RequestContext, active_only: bool = True) -> QuerySet[LabTestType]:
    qs = LabTestType.objects.filter(hospital_id=ctx.hospital_id)
    if active_only:
        qs = qs.filter(is_active=True)
    return qs.order_by("name")


def get_lab_order(*, ctx: RequestContext, order_id: UUID) -> LabOrder:
    return (
        LabOrder.objects.select_related("patient", "test_type", "bill", "sample", "result")
        .get(id=order_id, hospital_id=ctx.hospital_id)
    )


def lab_orders_filtered(
    *,
    ctx: RequestContext,
    status: str | None = None,
    patient_id: UUID | None = None,
) -> QuerySet[LabOrder]:
    qs = LabOrder.objects.select_related("patient", "test_type", "bill").filter(hospital_id=ctx.hospital_id)
    if status:
        qs = qs.filter(status=status)
    if patient_id is not None:
        qs = qs.filter(patient_id=patient_id)
    return qs.order_by("-order_date")

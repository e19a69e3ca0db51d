# hospital_core/billing/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import QuerySet

from hospital_core.billing.models import Bill
from hospital_core.common.context import RequestContext


def get_bill(*, ctx: RequestContext, bill_id: UUID) -> Bill:
    return Bill.objects.prefetch_related("items", "payments").get(id=bill_id, hospital_id=ctx.hospital_id)


def fetch_bill_for_lab_order(*, ctx: RequestContext, lab_order_id: UUID) -> Bill | None:
    """The lab order's bill, or None when it was never raised."""
    return Bill.objects.filter(hospital_id=ctx.hospital_id, lab_order_id=lab_order_id).first()


def bills_filtered(
    *,
    ctx: RequestContext,
    patient_id: UUID | None = None,
    is_paid: bool | None = None,
) -> QuerySet[Bill]:
    qs = Bill.objects.select_related("patient").prefetch_related("items").filter(hospital_id=ctx.hospital_id)
    if patient_id is not None:
        qs = qs.filter(patient_id=patient_id)
    if is_paid is not None:
        qs = qs.filter(is_paid=is_paid)
    return qs.order_by("-created_at")

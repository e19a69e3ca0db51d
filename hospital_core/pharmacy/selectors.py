# hospital_core/pharmacy/selectors.py
from __future__ import annotations

from datetime import date
from uuid import UUID

from django.db.models import F, IntegerField, Q, QuerySet, Sum
from django.db.models.functions import Coalesce

from hospital_core.common.context import RequestContext
from hospital_core.pharmacy.models import Medication, MedicationDispense, MedicationStock


def _with_on_hand(qs: QuerySet[Medication], on_date: date) -> QuerySet[Medication]:
    # expired batches don't count towards what can be dispensed
    return qs.annotate(
        on_hand=Coalesce(
            Sum("stock__quantity_on_hand", filter=Q(stock__expiry_date__gte=on_date)),
            0,
            output_field=IntegerField(),
        )
    )


def get_medication(*, ctx: RequestContext, medication_id: UUID, on_date: date) -> Medication:
    return _with_on_hand(Medication.objects.filter(hospital_id=ctx.hospital_id), on_date).get(id=medication_id)


def list_medications(
    *,
    ctx: RequestContext,
    on_date: date,
    q: str | None = None,
    low_stock_only: bool = False,
) -> QuerySet[Medication]:
    qs = Medication.objects.filter(hospital_id=ctx.hospital_id, is_active=True)

    qv = (q or "").strip()
    if qv:
        qs = qs.filter(Q(name__icontains=qv) | Q(generic_name__icontains=qv) | Q(category__icontains=qv))

    qs = _with_on_hand(qs, on_date)
    if low_stock_only:
        qs = qs.filter(on_hand__lte=F("reorder_point"))
    return qs.order_by("name", "dosage")


def list_stock(*, ctx: RequestContext, medication_id: UUID) -> QuerySet[MedicationStock]:
    return MedicationStock.objects.filter(hospital_id=ctx.hospital_id, medication_id=medication_id).order_by(
        "expiry_date", "batch_number"
    )


def get_dispense(*, ctx: RequestContext, dispense_id: UUID) -> MedicationDispense:
    return (
        MedicationDispense.objects.select_related("medication", "patient", "bill")
        .prefetch_related("batches__stock")
        .get(id=dispense_id, hospital_id=ctx.hospital_id)
    )


def dispenses_filtered(
    *,
    ctx: RequestContext,
    patient_id: UUID | None = None,
    medication_id: UUID | None = None,
) -> QuerySet[MedicationDispense]:
    qs = (
        MedicationDispense.objects.select_related("medication", "patient", "bill")
        .prefetch_related("batches__stock")
        .filter(hospital_id=ctx.hospital_id)
    )
    if patient_id is not None:
        qs = qs.filter(patient_id=patient_id)
    if medication_id is not None:
        qs = qs.filter(medication_id=medication_id)
    return qs.order_by("-dispensed_at")

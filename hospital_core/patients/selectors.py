# hospital_core/patients/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import Q, QuerySet

from hospital_core.common.context import RequestContext
from hospital_core.patients.models import Patient


def get_patient(*, ctx: RequestContext, patient_id: UUID) -> Patient:
    return Patient.objects.get(id=patient_id, hospital_id=ctx.hospital_id)


def search_patients(*, ctx: RequestContext, q: str | None = None) -> QuerySet[Patient]:
    qs = Patient.objects.filter(hospital_id=ctx.hospital_id)

    qv = (q or "").strip()
    if qv:
        qs = qs.filter(
            Q(first_name__icontains=qv)
            | Q(last_name__icontains=qv)
            | Q(phone__icontains=qv)
            | Q(email__icontains=qv)
        )

    return qs.order_by("-created_at")

# hospital_core/vitals/services.py
from __future__ import annotations

from uuid import UUID

from django.db import transaction
from django.utils import timezone

from hospital_core.audit.services import AuditService
from hospital_core.common.context import RequestContext
from hospital_core.common.events import VITALS_RECORDED, publish_on_commit
from hospital_core.patients.selectors import get_patient
from hospital_core.vitals.models import VitalSigns

MEASUREMENT_FIELDS = (
    "body_temperature",
    "heart_rate",
    "blood_pressure_systolic",
    "blood_pressure_diastolic",
    "oxygen_saturation",
    "weight",
)


class VitalsService:
    @staticmethod
    @transaction.atomic
    def record(
        *,
        ctx: RequestContext,
        patient_id: UUID,
        recorded_at=None,
        complaints: str = "",
        **measurements,
    ) -> VitalSigns:
        patient = get_patient(ctx=ctx, patient_id=patient_id)

        vitals = VitalSigns.objects.create(
            hospital_id=ctx.hospital_id,
            patient=patient,
            recorded_by_id=ctx.actor_user_id,
            recorded_at=recorded_at or timezone.now(),
            complaints=complaints or "",
            **{f: measurements.get(f) for f in MEASUREMENT_FIELDS},
        )

        AuditService.log(
            ctx=ctx,
            event_code="vitals.recorded",
            entity_type="VitalSigns",
            entity_id=vitals.id,
            metadata={"patient_id": str(patient.id)},
        )
        publish_on_commit(
            VITALS_RECORDED,
            {"hospital_id": str(ctx.hospital_id), "vitals_id": str(vitals.id), "patient_id": str(patient.id)},
        )
        return vitals

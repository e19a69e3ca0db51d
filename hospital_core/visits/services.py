# hospital_core/visits/services.py
from __future__ import annotations

from typing import Iterable
from uuid import UUID

from django.conf import settings
from django.db import transaction
from rest_framework.exceptions import ValidationError

from hospital_core.appointments.models import Appointment
from hospital_core.appointments.services import AppointmentService
from hospital_core.audit.services import AuditService
from hospital_core.billing.models import ItemType
from hospital_core.billing.services import BillingService
from hospital_core.common.context import RequestContext
from hospital_core.hospitals.selectors import hospital_today
from hospital_core.patients.selectors import get_patient
from hospital_core.visits.models import Visit


class VisitService:
    @staticmethod
    @transaction.atomic
    def record_visit(
        *,
        ctx: RequestContext,
        patient_id: UUID,
        appointment_id: UUID | None = None,
        chief_complaint: str = "",
        diagnosis: str = "",
        notes: str = "",
        extra_items: Iterable[dict] = (),
    ) -> Visit:
        """
        Record the consultation, complete the appointment (arrived ->
        completed) and bill the consultation fee plus any extra lines.
        """
        patient = get_patient(ctx=ctx, patient_id=patient_id)

        visit_date = hospital_today(hospital_id=ctx.hospital_id)
        if appointment_id is not None:
            appt = Appointment.objects.get(id=appointment_id, hospital_id=ctx.hospital_id)
            if appt.patient_id != patient.id:
                raise ValidationError({"appointment_id": "Appointment belongs to another patient."})
            AppointmentService.update_status(
                ctx=ctx,
                appointment_id=appt.id,
                status=Appointment.Status.COMPLETED,
            )
            visit_date = appt.scheduled_date

        visit = Visit.objects.create(
            hospital_id=ctx.hospital_id,
            patient=patient,
            appointment_id=appointment_id,
            doctor_id=ctx.actor_user_id,
            visit_date=visit_date,
            chief_complaint=chief_complaint or "",
            diagnosis=diagnosis or "",
            notes=notes or "",
        )

        BillingService.create_bill(
            ctx=ctx,
            patient_id=patient.id,
            visit_id=visit.id,
            description="Consultation",
            items=[
                {
                    "item_type": ItemType.SERVICE,
                    "description": "Consultation fee",
                    "quantity": 1,
                    "unit_price": settings.HOSPITAL_CONSULTATION_FEE,
                },
                *extra_items,
            ],
        )

        AuditService.log(
            ctx=ctx,
            event_code="visit.recorded",
            entity_type="Visit",
            entity_id=visit.id,
            metadata={"appointment_id": str(appointment_id) if appointment_id else None},
        )
        return visit

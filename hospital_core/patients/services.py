# hospital_core/patients/services.py
from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from django.conf import settings
from django.db import transaction
from rest_framework.exceptions import ValidationError

from hospital_core.appointments.models import Appointment
from hospital_core.appointments.results import NoAvailableSlot
from hospital_core.appointments.services import AppointmentService
from hospital_core.audit.services import AuditService
from hospital_core.common.context import RequestContext
from hospital_core.patients.models import Patient

MUTABLE_FIELDS = {"phone", "email", "address", "emergency_contact", "blood_group", "allergies"}


@dataclass(frozen=True)
class Registration:
    patient: Patient
    appointment: Appointment | None = None
    warnings: list[dict] = field(default_factory=list)


class PatientService:
    @staticmethod
    @transaction.atomic
    def create_patient(
        *,
        ctx: RequestContext,
        first_name: str,
        last_name: str,
        date_of_birth,
        gender: str,
        phone: str = "",
        email: str = "",
        address: str = "",
        emergency_contact: str = "",
        blood_group: str = "",
        allergies: str = "",
    ) -> Patient:
        patient = Patient.objects.create(
            hospital_id=ctx.hospital_id,
            first_name=first_name,
            last_name=last_name,
            date_of_birth=date_of_birth,
            gender=gender,
            phone=phone or "",
            email=email or "",
            address=address or "",
            emergency_contact=emergency_contact or "",
            blood_group=blood_group or "",
            allergies=allergies or "",
            registered_by_id=ctx.actor_user_id,
        )

        AuditService.log(
            ctx=ctx,
            event_code="patient.registered",
            entity_type="Patient",
            entity_id=patient.id,
        )
        return patient

    @staticmethod
    def register(*, ctx: RequestContext, auto_schedule: bool | None = None, **data) -> Registration:
        """
        Create the patient, then (optionally) book today's first free slot.

        The patient row is committed on its own; an exhausted day is a
        warning on the result, never a failed registration.
        """
        patient = PatientService.create_patient(ctx=ctx, **data)

        if auto_schedule is None:
            auto_schedule = settings.HOSPITAL_AUTO_APPOINTMENT_ON_REGISTRATION
        if not auto_schedule:
            return Registration(patient=patient)

        result = AppointmentService.auto_allocate(
            ctx=ctx,
            patient_id=patient.id,
            notes="Auto-scheduled at registration",
        )

        if isinstance(result, NoAvailableSlot):
            return Registration(
                patient=patient,
                warnings=[
                    {
                        "code": "no_available_slot",
                        "message": "Patient registered, but no appointment slot is free today.",
                        "scheduled_date": result.scheduled_date.isoformat(),
                    }
                ],
            )

        return Registration(patient=patient, appointment=result.appointment)

    @staticmethod
    @transaction.atomic
    def update_patient(*, ctx: RequestContext, patient_id: UUID, data: dict) -> Patient:
        """
        Contact and medical fields only; identity is fixed at registration.
        """
        patient = Patient.objects.select_for_update().get(id=patient_id, hospital_id=ctx.hospital_id)

        identity = sorted(set(data or {}) & set(Patient.IDENTITY_FIELDS))
        if identity:
            raise ValidationError({f: "Cannot be changed after registration." for f in identity})

        updates = {k: v for k, v in (data or {}).items() if k in MUTABLE_FIELDS}
        for k, v in updates.items():
            setattr(patient, k, v if v is not None else "")

        patient.save(update_fields=[*updates.keys(), "updated_at"])

        AuditService.log(
            ctx=ctx,
            event_code="patient.updated",
            entity_type="Patient",
            entity_id=patient.id,
            metadata={"updated_fields": sorted(updates.keys())},
        )
        return patient

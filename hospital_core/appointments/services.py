# hospital_core/appointments/services.py
from __future__ import annotations

import logging
import uuid
from datetime import date, time
from uuid import UUID

from django.db import IntegrityError, transaction
from rest_framework.exceptions import ValidationError

from hospital_core.appointments.models import Appointment
from hospital_core.appointments.recurrence import Frequency, recurring_dates
from hospital_core.appointments.results import (
    AllocationResult,
    Booked,
    BookingResult,
    NoAvailableSlot,
    RecurringBooked,
    RecurringConflict,
    RecurringResult,
    SlotConflict,
)
from hospital_core.appointments.selectors import (
    booked_start_times,
    live_appointment_at,
    occupied_intervals,
    taken_dates,
)
from hospital_core.appointments.slots import first_free_slot, format_slot, is_catalogue_slot, slot_end
from hospital_core.audit.services import AuditService
from hospital_core.common.api.exceptions import InvalidTransitionError
from hospital_core.common.context import RequestContext
from hospital_core.common.events import APPOINTMENTS_CHANGED, publish_on_commit
from hospital_core.hospitals.selectors import hospital_today
from hospital_core.patients.selectors import get_patient

logger = logging.getLogger(__name__)

Status = Appointment.Status

# Lifecycle: no skipping ahead, no going back.
ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    Status.SCHEDULED: {Status.ARRIVED, Status.CANCELLED},
    Status.ARRIVED: {Status.COMPLETED, Status.CANCELLED},
    Status.COMPLETED: set(),
    Status.CANCELLED: set(),
}


def assert_transition(current: str, target: str) -> None:
    if target not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidTransitionError(f"Cannot move appointment from '{current}' to '{target}'.")


def _require_catalogue_slot(start_time: time) -> None:
    if not is_catalogue_slot(start_time):
        raise ValidationError({"start_time": f"{format_slot(start_time)} is not a bookable slot."})


def _announce(ctx: RequestContext, appointment_ids: list[UUID], action: str) -> None:
    publish_on_commit(
        APPOINTMENTS_CHANGED,
        {
            "hospital_id": str(ctx.hospital_id),
            "appointment_ids": [str(i) for i in appointment_ids],
            "action": action,
        },
    )


class AppointmentService:
    @staticmethod
    def _insert(
        *,
        ctx: RequestContext,
        patient_id: UUID,
        scheduled_date: date,
        start_time: time,
        doctor_id: int | None = None,
        notes: str = "",
    ) -> BookingResult:
        """
        Insert one scheduled row inside a savepoint.

        A uniqueness rejection is confirmed by re-reading the store for a
        live row on the same slot; anything else is re-raised untouched.
        """
        try:
            with transaction.atomic():
                appt = Appointment.objects.create(
                    hospital_id=ctx.hospital_id,
                    patient_id=patient_id,
                    doctor_id=doctor_id,
                    scheduled_date=scheduled_date,
                    start_time=start_time,
                    end_time=slot_end(start_time),
                    status=Status.SCHEDULED,
                    notes=notes or "",
                    created_by_id=ctx.actor_user_id,
                )
        except IntegrityError:
            if live_appointment_at(ctx=ctx, on_date=scheduled_date, start_time=start_time) is None:
                raise
            logger.info(
                "Slot %s %s already taken in hospital %s",
                scheduled_date,
                format_slot(start_time),
                ctx.hospital_id,
            )
            return SlotConflict(
                scheduled_date=scheduled_date,
                start_time=start_time,
                booked_slots=booked_start_times(ctx=ctx, on_date=scheduled_date),
            )

        AuditService.log(
            ctx=ctx,
            event_code="appointment.booked",
            entity_type="Appointment",
            entity_id=appt.id,
            metadata={"scheduled_date": scheduled_date.isoformat(), "start_time": format_slot(start_time)},
        )
        _announce(ctx, [appt.id], "booked")
        return Booked(appointment=appt)

    @staticmethod
    def book(
        *,
        ctx: RequestContext,
        patient_id: UUID,
        scheduled_date: date,
        start_time: time,
        doctor_id: int | None = None,
        notes: str = "",
    ) -> BookingResult:
        """
        Manual booking of a chosen slot. No availability pre-check; a taken
        slot comes back as SlotConflict with the fresh booked set.
        """
        _require_catalogue_slot(start_time)
        patient = get_patient(ctx=ctx, patient_id=patient_id)

        return AppointmentService._insert(
            ctx=ctx,
            patient_id=patient.id,
            scheduled_date=scheduled_date,
            start_time=start_time,
            doctor_id=doctor_id,
            notes=notes,
        )

    @staticmethod
    def auto_allocate(
        *,
        ctx: RequestContext,
        patient_id: UUID,
        on_date: date | None = None,
        notes: str = "",
    ) -> AllocationResult:
        """
        Book the first free slot of the day (default: hospital's today).

        A slot lost to a concurrent booking is excluded and the day re-read,
        until the catalogue is exhausted.
        """
        on_date = on_date or hospital_today(hospital_id=ctx.hospital_id)
        patient = get_patient(ctx=ctx, patient_id=patient_id)

        rejected: set[time] = set()
        while True:
            candidate = first_free_slot(occupied_intervals(ctx=ctx, on_date=on_date), exclude=rejected)
            if candidate is None:
                logger.warning("No free slot on %s in hospital %s", on_date, ctx.hospital_id)
                return NoAvailableSlot(scheduled_date=on_date)

            result = AppointmentService._insert(
                ctx=ctx,
                patient_id=patient.id,
                scheduled_date=on_date,
                start_time=candidate,
                notes=notes,
            )
            if isinstance(result, Booked):
                return result

            rejected.add(candidate)

    @staticmethod
    def book_recurring(
        *,
        ctx: RequestContext,
        patient_id: UUID,
        start_date: date,
        end_date: date,
        frequency: Frequency | str,
        start_time: time,
        doctor_id: int | None = None,
        notes: str = "",
    ) -> RecurringResult:
        """
        Same slot on every occurrence, written as one batch.
        All or nothing: a taken date rejects the whole series.
        """
        _require_catalogue_slot(start_time)
        patient = get_patient(ctx=ctx, patient_id=patient_id)

        dates = recurring_dates(start_date, end_date, frequency)
        if not dates:
            raise ValidationError({"end_date": "end_date must be on or after start_date."})

        group = uuid.uuid4()
        rows = [
            Appointment(
                hospital_id=ctx.hospital_id,
                patient_id=patient.id,
                doctor_id=doctor_id,
                scheduled_date=d,
                start_time=start_time,
                end_time=slot_end(start_time),
                status=Status.SCHEDULED,
                notes=notes or "",
                created_by_id=ctx.actor_user_id,
                recurrence_group=group,
            )
            for d in dates
        ]

        try:
            with transaction.atomic():
                created = Appointment.objects.bulk_create(rows)
                AuditService.log(
                    ctx=ctx,
                    event_code="appointment.recurring_booked",
                    entity_type="Patient",
                    entity_id=patient.id,
                    metadata={
                        "recurrence_group": str(group),
                        "frequency": Frequency(frequency).value,
                        "dates": [d.isoformat() for d in dates],
                        "start_time": format_slot(start_time),
                    },
                )
        except IntegrityError:
            conflicting = taken_dates(ctx=ctx, dates=dates, start_time=start_time)
            if not conflicting:
                raise
            logger.info("Recurring series rejected, %d date(s) taken", len(conflicting))
            return RecurringConflict(conflicting_dates=conflicting)

        _announce(ctx, [a.id for a in created], "booked")
        return RecurringBooked(appointments=created, recurrence_group=group)

    @staticmethod
    @transaction.atomic
    def update_status(*, ctx: RequestContext, appointment_id: UUID, status: str) -> Appointment:
        appt = Appointment.objects.select_for_update().get(id=appointment_id, hospital_id=ctx.hospital_id)

        previous = appt.status
        assert_transition(previous, status)

        appt.status = status
        appt.save(update_fields=["status", "updated_at"])

        AuditService.log(
            ctx=ctx,
            event_code=f"appointment.{status}",
            entity_type="Appointment",
            entity_id=appt.id,
            metadata={"from": previous, "to": status},
        )
        _announce(ctx, [appt.id], status)
        return appt

    @staticmethod
    @transaction.atomic
    def reschedule(
        *,
        ctx: RequestContext,
        appointment_id: UUID,
        scheduled_date: date,
        start_time: time,
    ) -> BookingResult:
        """
        Move a scheduled appointment to another slot; status stays scheduled.
        """
        _require_catalogue_slot(start_time)
        appt = Appointment.objects.select_for_update().get(id=appointment_id, hospital_id=ctx.hospital_id)

        if appt.status != Status.SCHEDULED:
            raise InvalidTransitionError("Only scheduled appointments can be rescheduled.")

        previous = {"scheduled_date": appt.scheduled_date.isoformat(), "start_time": format_slot(appt.start_time)}

        try:
            with transaction.atomic():
                appt.scheduled_date = scheduled_date
                appt.start_time = start_time
                appt.end_time = slot_end(start_time)
                appt.save(update_fields=["scheduled_date", "start_time", "end_time", "updated_at"])
        except IntegrityError:
            holder = live_appointment_at(
                ctx=ctx, on_date=scheduled_date, start_time=start_time, exclude_id=appt.id
            )
            if holder is None:
                raise
            return SlotConflict(
                scheduled_date=scheduled_date,
                start_time=start_time,
                booked_slots=booked_start_times(ctx=ctx, on_date=scheduled_date),
            )

        AuditService.log(
            ctx=ctx,
            event_code="appointment.rescheduled",
            entity_type="Appointment",
            entity_id=appt.id,
            metadata={
                "from": previous,
                "to": {"scheduled_date": scheduled_date.isoformat(), "start_time": format_slot(start_time)},
            },
        )
        _announce(ctx, [appt.id], "rescheduled")
        return Booked(appointment=appt)

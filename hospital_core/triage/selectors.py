# hospital_core/triage/selectors.py
from __future__ import annotations

from datetime import date
from uuid import UUID

from hospital_core.appointments.models import Appointment
from hospital_core.appointments.selectors import fetch_appointments
from hospital_core.common.context import RequestContext


def open_appointments_by_patient(*, ctx: RequestContext, on_date: date) -> dict[UUID, Appointment]:
    """
    patient_id -> earliest appointment that day still open (scheduled or arrived).
    """
    rows = fetch_appointments(
        ctx=ctx,
        on_date=on_date,
        statuses=[Appointment.Status.SCHEDULED, Appointment.Status.ARRIVED],
    )

    by_patient: dict[UUID, Appointment] = {}
    for appt in rows:
        by_patient.setdefault(appt.patient_id, appt)
    return by_patient

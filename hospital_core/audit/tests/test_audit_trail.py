# hospital_core/audit/tests/test_audit_trail.py
from datetime import date, time

import pytest

from hospital_core.appointments.services import AppointmentService
from hospital_core.audit.models import AuditEvent
from hospital_core.tests.helpers import scoped

pytestmark = pytest.mark.django_db


def test_services_write_audit_events(ctx, patient, user):
    appt = AppointmentService.book(
        ctx=ctx, patient_id=patient.id, scheduled_date=date(2025, 3, 10), start_time=time(9, 0)
    ).appointment
    AppointmentService.update_status(ctx=ctx, appointment_id=appt.id, status="arrived")

    codes = set(AuditEvent.objects.filter(entity_id=appt.id).values_list("event_code", flat=True))
    assert codes == {"appointment.booked", "appointment.arrived"}

    arrived = AuditEvent.objects.get(entity_id=appt.id, event_code="appointment.arrived")
    assert arrived.actor_user_id == user.id
    assert arrived.metadata == {"from": "scheduled", "to": "arrived"}


def test_audit_events_api(api_client, hospital, ctx, patient):
    appt = AppointmentService.book(
        ctx=ctx, patient_id=patient.id, scheduled_date=date(2025, 3, 10), start_time=time(9, 0)
    ).appointment

    r = api_client.get(f"/api/v1/audit/events/?entity_id={appt.id}", **scoped(hospital))
    assert r.status_code == 200
    assert r.data["count"] == 1
    assert r.data["results"][0]["event_code"] == "appointment.booked"


def test_only_admins_read_audit(client_for, hospital):
    r = client_for("DOCTOR").get("/api/v1/audit/events/", **scoped(hospital))
    assert r.status_code == 403

# hospital_core/appointments/tests/test_appointments_api.py
from datetime import date, time

import pytest

from hospital_core.appointments.models import Appointment
from hospital_core.appointments.slots import generate_slots, slot_end
from hospital_core.tests.helpers import scoped

pytestmark = pytest.mark.django_db

URL = "/api/v1/appointments/"


def _book(api_client, hospital, patient, start="09:00", day="2025-03-10"):
    return api_client.post(
        URL,
        {"patient_id": str(patient.id), "scheduled_date": day, "start_time": start},
        format="json",
        **scoped(hospital),
    )


def test_create_and_retrieve(api_client, hospital, patient):
    r = _book(api_client, hospital, patient)
    assert r.status_code == 201, r.data
    assert r.data["start_time"] == "09:00"
    assert r.data["end_time"] == "09:15"
    assert r.data["status"] == "scheduled"
    assert r.data["patient_name"] == "Ada Obi"

    got = api_client.get(f"{URL}{r.data['id']}/", **scoped(hospital))
    assert got.status_code == 200
    assert got.data["id"] == r.data["id"]


def test_seconds_form_is_the_same_slot(api_client, hospital, patient, make_patient):
    assert _book(api_client, hospital, patient, start="09:00").status_code == 201

    r = _book(api_client, hospital, make_patient(), start="09:00:00")
    assert r.status_code == 409


def test_conflict_returns_fresh_booked_slots_and_clears_selection(api_client, hospital, patient, make_patient):
    _book(api_client, hospital, patient, start="08:30")
    _book(api_client, hospital, patient, start="09:00")

    r = _book(api_client, hospital, make_patient(), start="09:00")

    assert r.status_code == 409
    err = r.data["error"]
    assert err["code"] == "slot_conflict"
    assert "just been booked" in err["message"]
    assert err["details"]["selected_slot"] is None
    assert err["details"]["booked_slots"] == ["08:30", "09:00"]
    assert err["details"]["scheduled_date"] == "2025-03-10"
    assert err["request_id"]


def test_malformed_time_is_a_validation_error(api_client, hospital, patient):
    r = _book(api_client, hospital, patient, start="9am")
    assert r.status_code == 400
    assert r.data["error"]["code"] == "validation_error"
    assert "start_time" in r.data["error"]["details"]


def test_off_catalogue_time_rejected(api_client, hospital, patient):
    r = _book(api_client, hospital, patient, start="08:05")
    assert r.status_code == 400
    assert "start_time" in r.data["error"]["details"]


def test_slots_endpoint(api_client, hospital, patient):
    _book(api_client, hospital, patient, start="08:00")

    r = api_client.get(f"{URL}slots/?date=2025-03-10", **scoped(hospital))

    assert r.status_code == 200
    assert r.data["date"] == "2025-03-10"
    assert len(r.data["slots"]) == 36
    assert r.data["slots"][0] == {"start_time": "08:00", "end_time": "08:15", "available": False}
    assert r.data["slots"][-1]["start_time"] == "16:45"


def test_auto_allocate_endpoint(api_client, hospital, patient):
    r = api_client.post(
        f"{URL}auto-allocate/",
        {"patient_id": str(patient.id), "date": "2025-03-10"},
        format="json",
        **scoped(hospital),
    )
    assert r.status_code == 201, r.data
    assert r.data["start_time"] == "08:00"


def test_auto_allocate_full_day_is_409(api_client, hospital, patient):
    day = date(2025, 3, 10)
    Appointment.objects.bulk_create([
        Appointment(hospital_id=hospital.id, patient=patient, scheduled_date=day, start_time=s, end_time=slot_end(s))
        for s in generate_slots()
    ])

    r = api_client.post(
        f"{URL}auto-allocate/",
        {"patient_id": str(patient.id), "date": "2025-03-10"},
        format="json",
        **scoped(hospital),
    )
    assert r.status_code == 409
    assert r.data["error"]["code"] == "no_available_slot"


def test_recurring_endpoint_conflict_lists_dates(api_client, hospital, patient, make_patient):
    _book(api_client, hospital, make_patient(), start="10:00", day="2025-01-08")

    r = api_client.post(
        f"{URL}recurring/",
        {
            "patient_id": str(patient.id),
            "start_date": "2025-01-01",
            "end_date": "2025-01-15",
            "frequency": "weekly",
            "start_time": "10:00",
        },
        format="json",
        **scoped(hospital),
    )

    assert r.status_code == 409
    assert r.data["error"]["code"] == "slot_conflict"
    assert r.data["error"]["details"]["conflicting_dates"] == ["2025-01-08"]
    assert not Appointment.objects.filter(patient=patient).exists()


def test_recurring_endpoint_success(api_client, hospital, patient):
    r = api_client.post(
        f"{URL}recurring/",
        {
            "patient_id": str(patient.id),
            "start_date": "2025-01-31",
            "end_date": "2025-03-31",
            "frequency": "monthly",
            "start_time": "10:00",
        },
        format="json",
        **scoped(hospital),
    )
    assert r.status_code == 201, r.data
    assert r.data["count"] == 3
    assert [a["scheduled_date"] for a in r.data["appointments"]] == ["2025-01-31", "2025-02-28", "2025-03-31"]


def test_status_endpoint_and_invalid_transition(api_client, hospital, patient):
    appt_id = _book(api_client, hospital, patient).data["id"]

    r = api_client.post(f"{URL}{appt_id}/status/", {"status": "cancelled"}, format="json", **scoped(hospital))
    assert r.status_code == 200
    assert r.data["status"] == "cancelled"

    r = api_client.post(f"{URL}{appt_id}/status/", {"status": "arrived"}, format="json", **scoped(hospital))
    assert r.status_code == 409
    assert r.data["error"]["code"] == "invalid_transition"


def test_status_endpoint_does_not_accept_completed(api_client, hospital, patient):
    appt_id = _book(api_client, hospital, patient).data["id"]

    r = api_client.post(f"{URL}{appt_id}/status/", {"status": "completed"}, format="json", **scoped(hospital))
    assert r.status_code == 400


def test_reschedule_endpoint(api_client, hospital, patient):
    appt_id = _book(api_client, hospital, patient).data["id"]

    r = api_client.post(
        f"{URL}{appt_id}/reschedule/",
        {"scheduled_date": "2025-03-12", "start_time": "15:00"},
        format="json",
        **scoped(hospital),
    )
    assert r.status_code == 200, r.data
    assert r.data["scheduled_date"] == "2025-03-12"
    assert r.data["start_time"] == "15:00"


def test_list_filters_by_date_and_status(api_client, hospital, patient):
    a = _book(api_client, hospital, patient, start="09:00").data["id"]
    _book(api_client, hospital, patient, start="09:15")
    _book(api_client, hospital, patient, start="09:00", day="2025-03-11")
    api_client.post(f"{URL}{a}/status/", {"status": "arrived"}, format="json", **scoped(hospital))

    r = api_client.get(f"{URL}?date=2025-03-10&status=scheduled", **scoped(hospital))
    assert r.status_code == 200
    assert [x["start_time"] for x in r.data["results"]] == ["09:15"]

    r = api_client.get(f"{URL}?date=2025-03-10&status=scheduled,arrived", **scoped(hospital))
    assert r.data["count"] == 2


def test_unknown_appointment_is_404(api_client, hospital):
    r = api_client.get(f"{URL}00000000-0000-0000-0000-000000000000/", **scoped(hospital))
    assert r.status_code == 404
    assert r.data["error"]["code"] == "not_found"


def test_other_hospital_cannot_see_appointment(api_client, hospital, other_hospital, patient):
    appt_id = _book(api_client, hospital, patient).data["id"]

    r = api_client.get(f"{URL}{appt_id}/", **scoped(other_hospital))
    assert r.status_code == 404


def test_lab_role_cannot_book(client_for, hospital, patient):
    c = client_for("LAB")
    r = _book(c, hospital, patient)
    assert r.status_code == 403
    assert r.data["error"]["code"] == "permission_denied"

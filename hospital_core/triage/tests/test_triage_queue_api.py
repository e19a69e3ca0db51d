# hospital_core/triage/tests/test_triage_queue_api.py
from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

import pytest

from hospital_core.appointments.services import AppointmentService
from hospital_core.tests.helpers import scoped
from hospital_core.triage.services import TriageService
from hospital_core.visits.models import Visit
from hospital_core.vitals.services import VitalsService

pytestmark = pytest.mark.django_db

DAY = date(2025, 3, 10)


def at(hour, minute=0):
    return datetime(2025, 3, 10, hour, minute, tzinfo=timezone.utc)


def test_queue_orders_by_score_then_arrival(ctx, make_patient):
    stable = make_patient("Stable")
    sick = make_patient("Sick")
    early = make_patient("Early")

    VitalsService.record(ctx=ctx, patient_id=stable.id, recorded_at=at(8), heart_rate=72)
    VitalsService.record(ctx=ctx, patient_id=sick.id, recorded_at=at(9), body_temperature=40.0, oxygen_saturation=88)
    VitalsService.record(ctx=ctx, patient_id=early.id, recorded_at=at(7), heart_rate=75)

    queue = TriageService.build_queue(ctx=ctx, on_date=DAY)

    assert [e.patient_id for e in queue] == [sick.id, early.id, stable.id]
    assert queue[0].priority_score == 6
    assert queue[0].priority_level == "Critical"


def test_later_vitals_do_not_replace_first_record(ctx, patient):
    VitalsService.record(ctx=ctx, patient_id=patient.id, recorded_at=at(8), heart_rate=72)
    VitalsService.record(ctx=ctx, patient_id=patient.id, recorded_at=at(11), heart_rate=150)

    queue = TriageService.build_queue(ctx=ctx, on_date=DAY)

    assert len(queue) == 1
    assert queue[0].priority_score == 0


def test_queue_joins_open_appointment_and_drops_seen_patients(ctx, make_patient):
    booked = make_patient("Booked")
    walk_in = make_patient("Walkin")
    seen = make_patient("Seen")

    for p in (walk_in, booked, seen):
        VitalsService.record(ctx=ctx, patient_id=p.id, recorded_at=at(8), heart_rate=70)

    AppointmentService.book(ctx=ctx, patient_id=booked.id, scheduled_date=DAY, start_time=time(10, 0))
    Visit.objects.create(hospital_id=ctx.hospital_id, patient=seen, visit_date=DAY)

    queue = TriageService.build_queue(ctx=ctx, on_date=DAY)

    assert [e.patient_id for e in queue] == [booked.id, walk_in.id]
    assert queue[0].appointment.start_time == time(10, 0)
    assert queue[1].appointment is None


def test_queue_is_scoped_to_hospital(ctx, patient, other_hospital):
    from hospital_core.common.context import RequestContext

    VitalsService.record(ctx=ctx, patient_id=patient.id, recorded_at=at(8), heart_rate=70)

    other_ctx = RequestContext(actor_user_id=None, hospital_id=other_hospital.id)
    assert TriageService.build_queue(ctx=other_ctx, on_date=DAY) == []


def test_queue_endpoint(api_client, hospital, ctx, make_patient):
    a = make_patient("Ann")
    b = make_patient("Ben")
    VitalsService.record(ctx=ctx, patient_id=a.id, recorded_at=at(8), heart_rate=72)
    VitalsService.record(ctx=ctx, patient_id=b.id, recorded_at=at(9), heart_rate=130)

    r = api_client.get("/api/v1/triage/queue/?date=2025-03-10", **scoped(hospital))

    assert r.status_code == 200
    assert [e["patient_name"] for e in r.data] == ["Ben Test", "Ann Test"]
    assert [e["position"] for e in r.data] == [1, 2]
    assert r.data[0]["priority_level"] == "High"
    assert r.data[0]["vitals"]["heart_rate"] == 130
    assert r.data[0]["appointment"] is None


def test_finance_cannot_read_queue(client_for, hospital):
    r = client_for("FINANCE").get("/api/v1/triage/queue/", **scoped(hospital))
    assert r.status_code == 403


def test_queue_day_follows_hospital_timezone(ctx, hospital, make_patient):
    hospital.timezone = "America/New_York"
    hospital.save(update_fields=["timezone"])
    new_york = ZoneInfo("America/New_York")

    evening = make_patient("Evening")
    yesterday = make_patient("Yesterday")

    # 20:00 in New York is already 2025-03-11 in UTC and in Lagos
    VitalsService.record(
        ctx=ctx, patient_id=evening.id, recorded_at=datetime(2025, 3, 10, 20, 0, tzinfo=new_york), heart_rate=150
    )
    VitalsService.record(
        ctx=ctx, patient_id=yesterday.id, recorded_at=datetime(2025, 3, 9, 23, 30, tzinfo=new_york), heart_rate=72
    )

    queue = TriageService.build_queue(ctx=ctx, on_date=DAY)

    assert [e.patient_id for e in queue] == [evening.id]

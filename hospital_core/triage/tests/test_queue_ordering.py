# hospital_core/triage/tests/test_queue_ordering.py
from dataclasses import dataclass, field
from datetime import datetime, time, timezone
from typing import Optional
from uuid import UUID, uuid4

from hospital_core.triage.queue import build_queue, representative_vitals


@dataclass
class Rec:
    patient_id: UUID
    recorded_at: datetime
    body_temperature: Optional[float] = None
    heart_rate: Optional[float] = None
    blood_pressure_systolic: Optional[float] = None
    blood_pressure_diastolic: Optional[float] = None
    oxygen_saturation: Optional[float] = None
    id: UUID = field(default_factory=uuid4)


@dataclass
class Appt:
    patient_id: UUID
    start_time: time


def at(hour, minute=0):
    return datetime(2025, 1, 6, hour, minute, tzinfo=timezone.utc)


def test_higher_score_comes_first():
    a, b = uuid4(), uuid4()
    queue = build_queue([
        Rec(a, at(8), heart_rate=72),
        Rec(b, at(9), heart_rate=130),
    ])
    assert [e.patient_id for e in queue] == [b, a]
    assert [e.position for e in queue] == [1, 2]
    assert queue[0].priority_score == 3


def test_equal_scores_earliest_recording_first():
    a, b = uuid4(), uuid4()
    queue = build_queue([
        Rec(a, at(10), heart_rate=130),
        Rec(b, at(9), heart_rate=130),
    ])
    assert [e.patient_id for e in queue] == [b, a]


def test_appointment_before_walk_in_then_start_time():
    walk_in, late, early = uuid4(), uuid4(), uuid4()
    records = [Rec(p, at(9)) for p in (walk_in, late, early)]
    appts = {late: Appt(late, time(11, 0)), early: Appt(early, time(8, 30))}

    queue = build_queue(records, appts)

    assert [e.patient_id for e in queue] == [early, late, walk_in]
    assert queue[2].appointment is None


def test_full_ties_break_on_patient_id():
    ids = sorted((uuid4() for _ in range(3)), key=str)
    records = [Rec(p, at(9)) for p in reversed(ids)]

    queue = build_queue(records)

    assert [e.patient_id for e in queue] == ids


def test_one_entry_per_patient_first_record_wins():
    p = uuid4()
    first = Rec(p, at(8), heart_rate=72)
    later = Rec(p, at(12), heart_rate=140)

    queue = build_queue([later, first])

    assert len(queue) == 1
    assert queue[0].vitals is first
    assert queue[0].priority_score == 0


def test_representative_breaks_recorded_at_ties_by_id():
    p = uuid4()
    r1 = Rec(p, at(8), id=UUID("00000000-0000-0000-0000-000000000001"))
    r2 = Rec(p, at(8), id=UUID("00000000-0000-0000-0000-000000000002"))

    assert representative_vitals([r2, r1])[p] is r1


def test_excluded_patients_are_left_out():
    a, b = uuid4(), uuid4()
    queue = build_queue([Rec(a, at(8)), Rec(b, at(9))], exclude_patient_ids=[a])
    assert [e.patient_id for e in queue] == [b]
    assert queue[0].position == 1


def test_order_is_independent_of_input_order():
    records = [Rec(uuid4(), at(8 + i % 3), heart_rate=60 + 30 * (i % 4)) for i in range(12)]

    forward = [e.patient_id for e in build_queue(records)]
    backward = [e.patient_id for e in build_queue(list(reversed(records)))]

    assert forward == backward


def test_empty_input_gives_empty_queue():
    assert build_queue([]) == []

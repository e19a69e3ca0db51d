# hospital_core/appointments/tests/test_booking_services.py
from datetime import date, time

import pytest
from rest_framework.exceptions import ValidationError

from hospital_core.appointments.models import Appointment
from hospital_core.appointments.results import (
    Booked,
    NoAvailableSlot,
    RecurringBooked,
    RecurringConflict,
    SlotConflict,
)
from hospital_core.appointments.selectors import booked_start_times, slot_availability
from hospital_core.appointments.services import AppointmentService
from hospital_core.appointments.slots import generate_slots, slot_end
from hospital_core.common.api.exceptions import InvalidTransitionError
from hospital_core.common.events import APPOINTMENTS_CHANGED, subscribe, unsubscribe

pytestmark = pytest.mark.django_db

DAY = date(2025, 3, 10)


def fill_day(hospital, patient, on_date, slots=None):
    Appointment.objects.bulk_create([
        Appointment(
            hospital_id=hospital.id,
            patient=patient,
            scheduled_date=on_date,
            start_time=s,
            end_time=slot_end(s),
        )
        for s in (slots if slots is not None else generate_slots())
    ])


def test_book_free_slot(ctx, patient):
    result = AppointmentService.book(ctx=ctx, patient_id=patient.id, scheduled_date=DAY, start_time=time(9, 0))

    assert isinstance(result, Booked)
    appt = result.appointment
    assert appt.status == Appointment.Status.SCHEDULED
    assert appt.end_time == time(9, 15)
    assert appt.hospital_id == ctx.hospital_id


def test_second_booking_of_same_slot_is_a_conflict(ctx, patient, make_patient):
    first = AppointmentService.book(ctx=ctx, patient_id=patient.id, scheduled_date=DAY, start_time=time(9, 0))
    assert isinstance(first, Booked)

    other = make_patient()
    second = AppointmentService.book(ctx=ctx, patient_id=other.id, scheduled_date=DAY, start_time=time(9, 0))

    assert isinstance(second, SlotConflict)
    assert second.start_time == time(9, 0)
    assert second.booked_slots == [time(9, 0)]
    assert Appointment.objects.filter(scheduled_date=DAY, start_time=time(9, 0)).count() == 1


def test_cancelled_appointment_frees_its_slot(ctx, patient, make_patient):
    first = AppointmentService.book(ctx=ctx, patient_id=patient.id, scheduled_date=DAY, start_time=time(9, 0))
    AppointmentService.update_status(ctx=ctx, appointment_id=first.appointment.id, status="cancelled")

    again = AppointmentService.book(ctx=ctx, patient_id=make_patient().id, scheduled_date=DAY, start_time=time(9, 0))
    assert isinstance(again, Booked)


def test_arrived_slot_looks_free_but_still_conflicts(ctx, patient, make_patient):
    first = AppointmentService.book(ctx=ctx, patient_id=patient.id, scheduled_date=DAY, start_time=time(9, 0))
    AppointmentService.update_status(ctx=ctx, appointment_id=first.appointment.id, status="arrived")

    assert booked_start_times(ctx=ctx, on_date=DAY) == []

    result = AppointmentService.book(ctx=ctx, patient_id=make_patient().id, scheduled_date=DAY, start_time=time(9, 0))
    assert isinstance(result, SlotConflict)


def test_same_slot_in_another_hospital_is_independent(ctx, patient, other_hospital):
    from hospital_core.common.context import RequestContext
    from hospital_core.patients.models import Patient

    AppointmentService.book(ctx=ctx, patient_id=patient.id, scheduled_date=DAY, start_time=time(9, 0))

    other_ctx = RequestContext(actor_user_id=None, hospital_id=other_hospital.id)
    other_patient = Patient.objects.create(
        hospital_id=other_hospital.id,
        first_name="Kemi",
        last_name="Ade",
        date_of_birth="1970-02-02",
        gender="female",
    )
    result = AppointmentService.book(
        ctx=other_ctx, patient_id=other_patient.id, scheduled_date=DAY, start_time=time(9, 0)
    )
    assert isinstance(result, Booked)


def test_off_catalogue_start_time_rejected(ctx, patient):
    with pytest.raises(ValidationError) as exc:
        AppointmentService.book(ctx=ctx, patient_id=patient.id, scheduled_date=DAY, start_time=time(17, 0))
    assert "start_time" in exc.value.detail


def test_slot_availability_marks_booked_slots(ctx, patient):
    AppointmentService.book(ctx=ctx, patient_id=patient.id, scheduled_date=DAY, start_time=time(8, 15))

    slots = slot_availability(ctx=ctx, on_date=DAY)

    assert len(slots) == 36
    assert slots[1] == {"start_time": "08:15", "end_time": "08:30", "available": False}
    assert all(s["available"] for i, s in enumerate(slots) if i != 1)


def test_auto_allocate_takes_first_free_slot(ctx, patient, hospital):
    fill_day(hospital, patient, DAY, slots=[time(8, 0), time(8, 15)])

    result = AppointmentService.auto_allocate(ctx=ctx, patient_id=patient.id, on_date=DAY)

    assert isinstance(result, Booked)
    assert result.appointment.start_time == time(8, 30)


def test_auto_allocate_ignores_cancelled_rows(ctx, patient, hospital):
    fill_day(hospital, patient, DAY, slots=[time(8, 0)])
    Appointment.objects.filter(scheduled_date=DAY).update(status=Appointment.Status.CANCELLED)

    result = AppointmentService.auto_allocate(ctx=ctx, patient_id=patient.id, on_date=DAY)
    assert result.appointment.start_time == time(8, 0)


def test_auto_allocate_full_day_returns_no_available_slot(ctx, patient, hospital):
    fill_day(hospital, patient, DAY)

    result = AppointmentService.auto_allocate(ctx=ctx, patient_id=patient.id, on_date=DAY)

    assert isinstance(result, NoAvailableSlot)
    assert result.scheduled_date == DAY
    assert Appointment.objects.filter(scheduled_date=DAY).count() == 36


def test_auto_allocate_retries_after_losing_a_race(ctx, patient, hospital, monkeypatch):
    """
    The first candidate is taken between the read and the insert; the
    allocator moves on to the next slot.
    """
    import hospital_core.appointments.services as services

    real = services.occupied_intervals
    calls = {"n": 0}

    def stale_read(**kwargs):
        calls["n"] += 1
        if calls["n"] == 1:
            fill_day(hospital, patient, DAY, slots=[time(8, 0)])
            return []
        return real(**kwargs)

    monkeypatch.setattr(services, "occupied_intervals", stale_read)

    result = AppointmentService.auto_allocate(ctx=ctx, patient_id=patient.id, on_date=DAY)

    assert isinstance(result, Booked)
    assert result.appointment.start_time == time(8, 15)


def test_recurring_books_every_occurrence(ctx, patient):
    result = AppointmentService.book_recurring(
        ctx=ctx,
        patient_id=patient.id,
        start_date=date(2025, 1, 1),
        end_date=date(2025, 1, 15),
        frequency="weekly",
        start_time=time(10, 0),
    )

    assert isinstance(result, RecurringBooked)
    assert [a.scheduled_date for a in result.appointments] == [
        date(2025, 1, 1),
        date(2025, 1, 8),
        date(2025, 1, 15),
    ]
    assert Appointment.objects.filter(recurrence_group=result.recurrence_group).count() == 3


def test_recurring_conflict_writes_nothing(ctx, patient, make_patient):
    AppointmentService.book(
        ctx=ctx, patient_id=make_patient().id, scheduled_date=date(2025, 1, 8), start_time=time(10, 0)
    )

    result = AppointmentService.book_recurring(
        ctx=ctx,
        patient_id=patient.id,
        start_date=date(2025, 1, 1),
        end_date=date(2025, 1, 15),
        frequency="weekly",
        start_time=time(10, 0),
    )

    assert isinstance(result, RecurringConflict)
    assert result.conflicting_dates == [date(2025, 1, 8)]
    assert not Appointment.objects.filter(patient=patient).exists()


def test_recurring_end_before_start_rejected(ctx, patient):
    with pytest.raises(ValidationError):
        AppointmentService.book_recurring(
            ctx=ctx,
            patient_id=patient.id,
            start_date=date(2025, 1, 15),
            end_date=date(2025, 1, 1),
            frequency="weekly",
            start_time=time(10, 0),
        )


@pytest.mark.parametrize(
    "path, ok",
    [
        (["arrived"], True),
        (["cancelled"], True),
        (["arrived", "completed"], True),
        (["arrived", "cancelled"], True),
        (["completed"], False),
        (["arrived", "scheduled"], False),
        (["cancelled", "arrived"], False),
        (["arrived", "completed", "cancelled"], False),
    ],
)
def test_status_lifecycle(ctx, patient, path, ok):
    appt = AppointmentService.book(
        ctx=ctx, patient_id=patient.id, scheduled_date=DAY, start_time=time(11, 0)
    ).appointment

    def walk():
        for status in path:
            AppointmentService.update_status(ctx=ctx, appointment_id=appt.id, status=status)

    if ok:
        walk()
        appt.refresh_from_db()
        assert appt.status == path[-1]
    else:
        with pytest.raises(InvalidTransitionError):
            walk()


def test_reschedule_moves_slot(ctx, patient):
    appt = AppointmentService.book(ctx=ctx, patient_id=patient.id, scheduled_date=DAY, start_time=time(9, 0)).appointment

    result = AppointmentService.reschedule(
        ctx=ctx, appointment_id=appt.id, scheduled_date=date(2025, 3, 11), start_time=time(14, 30)
    )

    assert isinstance(result, Booked)
    appt.refresh_from_db()
    assert appt.scheduled_date == date(2025, 3, 11)
    assert appt.start_time == time(14, 30)
    assert appt.end_time == time(14, 45)
    assert appt.status == Appointment.Status.SCHEDULED


def test_reschedule_onto_taken_slot_is_a_conflict(ctx, patient, make_patient):
    appt = AppointmentService.book(ctx=ctx, patient_id=patient.id, scheduled_date=DAY, start_time=time(9, 0)).appointment
    AppointmentService.book(ctx=ctx, patient_id=make_patient().id, scheduled_date=DAY, start_time=time(9, 30))

    result = AppointmentService.reschedule(ctx=ctx, appointment_id=appt.id, scheduled_date=DAY, start_time=time(9, 30))

    assert isinstance(result, SlotConflict)
    appt.refresh_from_db()
    assert appt.start_time == time(9, 0)


def test_reschedule_requires_scheduled_status(ctx, patient):
    appt = AppointmentService.book(ctx=ctx, patient_id=patient.id, scheduled_date=DAY, start_time=time(9, 0)).appointment
    AppointmentService.update_status(ctx=ctx, appointment_id=appt.id, status="arrived")

    with pytest.raises(InvalidTransitionError):
        AppointmentService.reschedule(ctx=ctx, appointment_id=appt.id, scheduled_date=DAY, start_time=time(10, 0))


def test_booking_publishes_change_after_commit(ctx, patient, django_capture_on_commit_callbacks):
    received = []

    def handler(payload):
        received.append(payload)

    subscribe(APPOINTMENTS_CHANGED)(handler)
    try:
        with django_capture_on_commit_callbacks(execute=True):
            result = AppointmentService.book(ctx=ctx, patient_id=patient.id, scheduled_date=DAY, start_time=time(9, 0))
    finally:
        unsubscribe(APPOINTMENTS_CHANGED, handler)

    assert received == [
        {
            "hospital_id": str(ctx.hospital_id),
            "appointment_ids": [str(result.appointment.id)],
            "action": "booked",
        }
    ]

# hospital_core/appointments/selectors.py
from __future__ import annotations

from datetime import date, time
from typing import Iterable
from uuid import UUID

from django.db.models import QuerySet

from hospital_core.appointments.models import Appointment
from hospital_core.appointments.slots import format_slot, generate_slots, slot_end
from hospital_core.common.context import RequestContext

Status = Appointment.Status


def get_appointment(*, ctx: RequestContext, appointment_id: UUID) -> Appointment:
    return Appointment.objects.select_related("patient").get(id=appointment_id, hospital_id=ctx.hospital_id)


def fetch_appointments(
    *,
    ctx: RequestContext,
    on_date: date | None = None,
    statuses: Iterable[str] | None = None,
    patient_id: UUID | None = None,
) -> QuerySet[Appointment]:
    qs = Appointment.objects.select_related("patient").filter(hospital_id=ctx.hospital_id)

    if on_date is not None:
        qs = qs.filter(scheduled_date=on_date)
    if statuses:
        qs = qs.filter(status__in=list(statuses))
    if patient_id is not None:
        qs = qs.filter(patient_id=patient_id)

    return qs.order_by("scheduled_date", "start_time", "created_at")


def booked_start_times(*, ctx: RequestContext, on_date: date) -> list[time]:
    """
    Start times of scheduled appointments on the date.
    Advisory only: the uniqueness constraint is the real guard.
    """
    rows = fetch_appointments(ctx=ctx, on_date=on_date, statuses=[Status.SCHEDULED])
    return sorted(set(rows.values_list("start_time", flat=True)))


def slot_availability(*, ctx: RequestContext, on_date: date) -> list[dict]:
    booked = set(booked_start_times(ctx=ctx, on_date=on_date))
    return [
        {
            "start_time": format_slot(slot),
            "end_time": format_slot(slot_end(slot)),
            "available": slot not in booked,
        }
        for slot in generate_slots()
    ]


def occupied_intervals(*, ctx: RequestContext, on_date: date) -> list[tuple[time, time]]:
    """
    [start, end) of the day's scheduled and arrived appointments, by start_time.
    """
    rows = fetch_appointments(ctx=ctx, on_date=on_date, statuses=[Status.SCHEDULED, Status.ARRIVED])
    return list(rows.values_list("start_time", "end_time"))


def live_appointment_at(
    *,
    ctx: RequestContext,
    on_date: date,
    start_time: time,
    exclude_id: UUID | None = None,
) -> Appointment | None:
    """
    The non-cancelled row holding (date, start_time), if any.
    """
    qs = Appointment.objects.filter(
        hospital_id=ctx.hospital_id,
        scheduled_date=on_date,
        start_time=start_time,
    ).exclude(status=Status.CANCELLED)
    if exclude_id is not None:
        qs = qs.exclude(id=exclude_id)
    return qs.first()


def taken_dates(*, ctx: RequestContext, dates: Iterable[date], start_time: time) -> list[date]:
    return sorted(
        set(
            Appointment.objects.filter(
                hospital_id=ctx.hospital_id,
                scheduled_date__in=list(dates),
                start_time=start_time,
            )
            .exclude(status=Status.CANCELLED)
            .values_list("scheduled_date", flat=True)
        )
    )

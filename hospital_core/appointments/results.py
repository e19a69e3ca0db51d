# hospital_core/appointments/results.py
"""
Typed outcomes of booking operations.

A taken slot is an expected outcome of optimistic booking, so it is
returned rather than raised; views decide how to render it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import Union
from uuid import UUID

from hospital_core.appointments.models import Appointment


@dataclass(frozen=True)
class Booked:
    appointment: Appointment


@dataclass(frozen=True)
class SlotConflict:
    """Another live appointment holds this slot. booked_slots is re-read after the rejection."""
    scheduled_date: date
    start_time: time
    booked_slots: list[time] = field(default_factory=list)


@dataclass(frozen=True)
class NoAvailableSlot:
    scheduled_date: date


@dataclass(frozen=True)
class RecurringBooked:
    appointments: list[Appointment]
    recurrence_group: UUID


@dataclass(frozen=True)
class RecurringConflict:
    """Nothing was written; these dates already had a live booking at the requested time."""
    conflicting_dates: list[date]


BookingResult = Union[Booked, SlotConflict]
AllocationResult = Union[Booked, NoAvailableSlot]
RecurringResult = Union[RecurringBooked, RecurringConflict]

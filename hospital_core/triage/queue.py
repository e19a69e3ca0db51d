# hospital_core/triage/queue.py
"""
Ordering of the day's triage queue.

One entry per patient, represented by that patient's first vitals record
of the day. Order: score (high first), then vitals recorded_at (earliest
first), then patients with an appointment before walk-ins, then
appointment start_time, then patient id so the order is total.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import time
from typing import Any, Iterable, Mapping, Optional
from uuid import UUID

from hospital_core.triage.scoring import priority_level, priority_score


@dataclass(frozen=True)
class TriageEntry:
    patient_id: UUID
    vitals: Any
    appointment: Optional[Any]
    priority_score: int
    position: int = 0

    @property
    def priority_level(self) -> str:
        return priority_level(self.priority_score)


def _record_order(record: Any) -> tuple:
    created_at = getattr(record, "created_at", None) or record.recorded_at
    return (record.recorded_at, created_at, str(getattr(record, "id", "")))


def representative_vitals(records: Iterable[Any]) -> dict[UUID, Any]:
    """
    patient_id -> earliest record of the day (recorded_at, then created_at, then id).
    """
    chosen: dict[UUID, Any] = {}
    for record in records:
        current = chosen.get(record.patient_id)
        if current is None or _record_order(record) < _record_order(current):
            chosen[record.patient_id] = record
    return chosen


def sort_key(entry: TriageEntry) -> tuple:
    appt = entry.appointment
    return (
        -entry.priority_score,
        entry.vitals.recorded_at,
        0 if appt is not None else 1,
        appt.start_time if appt is not None else time.max,
        str(entry.patient_id),
    )


def build_queue(
    vitals_records: Iterable[Any],
    appointments_by_patient: Optional[Mapping[UUID, Any]] = None,
    *,
    exclude_patient_ids: Iterable[UUID] = (),
) -> list[TriageEntry]:
    """
    Pure: no store access, safe to re-run on every change notification.
    Positions are 1-based.
    """
    appointments_by_patient = appointments_by_patient or {}
    excluded = set(exclude_patient_ids)

    entries = [
        TriageEntry(
            patient_id=patient_id,
            vitals=record,
            appointment=appointments_by_patient.get(patient_id),
            priority_score=priority_score(record),
        )
        for patient_id, record in representative_vitals(vitals_records).items()
        if patient_id not in excluded
    ]

    ordered = sorted(entries, key=sort_key)
    return [dataclasses.replace(e, position=i) for i, e in enumerate(ordered, start=1)]

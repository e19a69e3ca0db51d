# hospital_core/triage/services.py
from __future__ import annotations

from datetime import date

from hospital_core.common.context import RequestContext
from hospital_core.hospitals.selectors import hospital_today
from hospital_core.triage.queue import TriageEntry, build_queue
from hospital_core.triage.selectors import open_appointments_by_patient
from hospital_core.visits.selectors import visited_patient_ids
from hospital_core.vitals.selectors import fetch_vitals_for_date


class TriageService:
    """
    Read-side only: the queue is derived from the store on every call and
    never persisted.
    """

    @staticmethod
    def build_queue(*, ctx: RequestContext, on_date: date | None = None) -> list[TriageEntry]:
        on_date = on_date or hospital_today(hospital_id=ctx.hospital_id)

        return build_queue(
            fetch_vitals_for_date(ctx=ctx, on_date=on_date),
            open_appointments_by_patient(ctx=ctx, on_date=on_date),
            exclude_patient_ids=visited_patient_ids(ctx=ctx, on_date=on_date),
        )

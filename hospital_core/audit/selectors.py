# hospital_core/audit/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import QuerySet

from hospital_core.audit.models import AuditEvent
from hospital_core.common.context import RequestContext


def list_audit_events(
    *,
    ctx: RequestContext,
    entity_type: str | None = None,
    entity_id: UUID | None = None,
    event_code: str | None = None,
) -> QuerySet[AuditEvent]:
    qs = AuditEvent.objects.filter(hospital_id=ctx.hospital_id)

    if entity_type:
        qs = qs.filter(entity_type=entity_type)
    if entity_id:
        qs = qs.filter(entity_id=entity_id)
    if event_code:
        qs = qs.filter(event_code=event_code)

    return qs.order_by("-occurred_at")

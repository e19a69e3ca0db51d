# hospital_core/audit/services.py
from __future__ import annotations

from typing import Any, Dict, Optional
from uuid import UUID

from django.db import transaction

from hospital_core.audit.models import AuditEvent
from hospital_core.common.context import RequestContext


class AuditService:
    """
    Central audit writer. Called inside the service transaction that made
    the change, so the audit row commits or rolls back with it.
    """

    @staticmethod
    @transaction.atomic
    def log(
        *,
        ctx: RequestContext,
        event_code: str,
        entity_type: str,
        entity_id: UUID,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AuditEvent:
        return AuditEvent.objects.create(
            hospital_id=ctx.hospital_id,
            event_code=event_code,
            entity_type=entity_type,
            entity_id=entity_id,
            actor_user_id=ctx.actor_user_id,
            metadata=metadata or {},
        )

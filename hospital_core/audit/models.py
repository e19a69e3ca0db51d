# hospital_core/audit/models.py
from django.conf import settings
from django.db import models
from hospital_core.common.models import ScopedModel


class AuditEvent(ScopedModel):
    """
    Immutable audit record of workflow changes (bookings, status moves, payments).
    """
    event_code = models.CharField(max_length=128, db_index=True)  # e.g. "appointment.booked"
    entity_type = models.CharField(max_length=128, db_index=True)  # e.g. "Appointment"
    entity_id = models.UUIDField(db_index=True)

    actor_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="audit_events",
        null=True,
        blank=True,
    )

    occurred_at = models.DateTimeField(auto_now_add=True, db_index=True)
    metadata = models.JSONField(default=dict)

    class Meta:
        db_table = "audit_audit_event"
        indexes = [
            models.Index(fields=["hospital_id", "occurred_at"]),
            models.Index(fields=["entity_type", "entity_id"]),
            models.Index(fields=["hospital_id", "event_code"]),
        ]

# hospital_core/iam/models.py
import uuid
from django.conf import settings
from django.db import models
from hospital_core.hospitals.models import Hospital


class HospitalMembership(models.Model):
    """
    Grants a user access to one hospital.
    What they may do there comes from their Django auth groups (roles).
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="hospital_memberships")
    hospital = models.ForeignKey(Hospital, on_delete=models.PROTECT, related_name="memberships")

    is_primary = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "iam_hospital_membership"
        constraints = [
            models.UniqueConstraint(fields=["user", "hospital"], name="uq_hospital_user_membership"),
        ]
        indexes = [
            models.Index(fields=["hospital", "is_active"]),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} @ {self.hospital_id}"

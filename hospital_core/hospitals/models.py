# hospital_core/hospitals/models.py
from __future__ import annotations

import uuid

from django.db import models


class Hospital(models.Model):
    """
    Top-level organization and root of all scoping.
    NOT a ScopedModel (it *is* the scope).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)
    code = models.SlugField(max_length=64, unique=True)

    timezone = models.CharField(max_length=64, default="Africa/Lagos")

    phone = models.CharField(max_length=32, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.CharField(max_length=255, blank=True, default="")

    is_active = models.BooleanField(default=True, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "hospitals_hospital"
        indexes = [
            models.Index(fields=["code"]),
            models.Index(fields=["is_active"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"

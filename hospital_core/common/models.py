# hospital_core/common/models.py
from __future__ import annotations

import uuid
from django.db import models


class TimeStampedModel(models.Model):
    """
    Standard timestamps for all entities.
    """
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class ScopedModel(TimeStampedModel):
    """
    Enforces hospital scope at the data layer.
    (Middleware enforces request scope; this enforces persistence scope.)
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    hospital_id = models.UUIDField(db_index=True)

    class Meta:
        abstract = True

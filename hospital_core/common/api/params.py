# hospital_core/common/api/params.py
from __future__ import annotations

from datetime import date
from uuid import UUID

from rest_framework.exceptions import ValidationError
from rest_framework.fields import DateField


def date_param(request, name: str = "date", *, default: date | None = None) -> date | None:
    raw = request.query_params.get(name)
    if not raw:
        return default
    try:
        return DateField().to_internal_value(raw)
    except ValidationError:
        raise ValidationError({name: "Invalid date (YYYY-MM-DD expected)."})


def uuid_param(request, name: str) -> UUID | None:
    raw = request.query_params.get(name)
    if not raw:
        return None
    try:
        return UUID(str(raw))
    except ValueError:
        raise ValidationError({name: "Invalid UUID"})

# hospital_core/common/context.py
from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from rest_framework.exceptions import ValidationError

from hospital_core.iam.scope import MISSING_SCOPE_MSG, resolve_scope_from_headers


@dataclass(frozen=True)
class RequestContext:
    """
    Who is acting, and for which hospital.

    Passed explicitly (ctx=...) into services and selectors so none of them
    read ambient session state.
    """
    actor_user_id: int | None
    hospital_id: UUID


def require_context(request) -> RequestContext:
    """
    Build the RequestContext for a DRF request.

    - Prefer the hospital_id attached by middleware/authentication
    - Fall back to the X-Hospital-Id header
    - Missing scope -> 400 (ValidationError flows through the envelope handler)
    """
    user = getattr(request, "user", None)
    actor_user_id = user.id if user is not None and getattr(user, "is_authenticated", False) else None

    hospital_id = getattr(request, "hospital_id", None)
    if hospital_id:
        return RequestContext(actor_user_id=actor_user_id, hospital_id=UUID(str(hospital_id)))

    scope = resolve_scope_from_headers(request)
    if scope is None:
        raise ValidationError(MISSING_SCOPE_MSG)

    request.hospital_id = scope.hospital_id
    return RequestContext(actor_user_id=actor_user_id, hospital_id=scope.hospital_id)

# hospital_core/iam/scope.py
from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from rest_framework.exceptions import PermissionDenied, ValidationError

from hospital_core.iam.services import membership


@dataclass(frozen=True)
class Scope:
    hospital_id: UUID


HDR_HOSPITAL = "X-Hospital-Id"
META_HOSPITAL = "HTTP_X_HOSPITAL_ID"

MISSING_SCOPE_MSG = "Missing scope header. Provide X-Hospital-Id."
INVALID_SCOPE_MSG = "Invalid scope header. Provide a valid UUID for X-Hospital-Id."


def parse_uuid(value) -> UUID | None:
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


def _get_header(request) -> str | None:
    """
    request.headers is case-insensitive; fall back to META for RequestFactory.
    """
    headers = getattr(request, "headers", None)
    if headers is not None:
        v = headers.get(HDR_HOSPITAL)
        if v:
            return v
    return request.META.get(META_HOSPITAL)


def resolve_scope_from_headers(request) -> Scope | None:
    """
    Reads the scope header.
    - Missing: returns None.
    - Present but not a UUID: raises 400 ValidationError with INVALID_SCOPE_MSG.
    """
    raw = _get_header(request)
    if not raw:
        return None

    hospital_id = parse_uuid(raw)
    if hospital_id is None:
        raise ValidationError(INVALID_SCOPE_MSG)
    return Scope(hospital_id=hospital_id)


def assert_user_membership(user, scope: Scope) -> None:
    """
    Raises 403 unless the user is an active member of the hospital.
    """
    if not user or not getattr(user, "is_authenticated", False):
        raise PermissionDenied("Authentication required to set scope.")

    if not membership.is_user_member_of_hospital(user_id=user.id, hospital_id=scope.hospital_id):
        raise PermissionDenied("You do not have access to the selected hospital.")


def apply_scope_from_headers(request, user=None) -> Scope | None:
    """
    Used by the authentication layer once the user is known.

    If the header is present: validate, verify membership, attach
    request.hospital_id / request.scope. Otherwise do nothing.
    """
    scope = resolve_scope_from_headers(request)
    if scope is None:
        return None

    u = user or getattr(request, "user", None)
    assert_user_membership(u, scope)

    request.hospital_id = scope.hospital_id
    request.scope = scope
    return scope

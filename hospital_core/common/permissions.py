# hospital_core/common/permissions.py

from __future__ import annotations

from typing import Set

from rest_framework.permissions import BasePermission, SAFE_METHODS

from hospital_core.iam.scope import META_HOSPITAL, parse_uuid

# Group/role names (Django auth Group names)
ROLE_ADMIN = "ADMIN"
ROLE_DOCTOR = "DOCTOR"
ROLE_NURSE = "NURSE"
ROLE_RECEPTION = "RECEPTION"
ROLE_LAB = "LAB"
ROLE_FINANCE = "FINANCE"
ROLE_PHARMACY = "PHARMACY"
ROLE_READONLY = "READONLY"

ALL_STAFF = {
    ROLE_ADMIN,
    ROLE_DOCTOR,
    ROLE_NURSE,
    ROLE_RECEPTION,
    ROLE_LAB,
    ROLE_FINANCE,
    ROLE_PHARMACY,
    ROLE_READONLY,
}
CLINICAL = {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE}


def user_roles(user) -> Set[str]:
    """
    Roles come from Django groups. Superusers are ADMIN.
    An authenticated user with no groups is READONLY.
    """
    roles: Set[str] = set()

    if not user or not getattr(user, "is_authenticated", False):
        return roles

    if getattr(user, "is_superuser", False):
        roles.add(ROLE_ADMIN)
        return roles

    if hasattr(user, "groups"):
        roles.update(user.groups.values_list("name", flat=True))

    if not roles:
        roles.add(ROLE_READONLY)

    return roles


def ensure_scope_on_request(request) -> bool:
    """
    Ensure request.hospital_id exists.

    Permissions must not raise ValidationError (it becomes 400), so a
    missing or invalid header returns False and DRF answers 403.
    """
    if getattr(request, "hospital_id", None):
        return True

    raw = request.headers.get("X-Hospital-Id") or request.META.get(META_HOSPITAL)
    if not raw:
        return False

    hospital_id = parse_uuid(raw)
    if hospital_id is None:
        return False

    request.hospital_id = hospital_id
    return True


class BaseRolePermission(BasePermission):
    """
    Role-based access control keyed on the viewset action.

    - ADMIN bypass.
    - Unknown action on a SAFE method falls back to list/retrieve.
    - Unknown action otherwise is denied.
    """
    message = "You do not have permission to perform this action."

    allowed_roles_per_action: dict[str, set[str]] = {
        "list": ALL_STAFF,
        "retrieve": ALL_STAFF,
        "create": {ROLE_ADMIN},
        "update": {ROLE_ADMIN},
        "partial_update": {ROLE_ADMIN},
        "destroy": {ROLE_ADMIN},
    }

    def _infer_action(self, request, view) -> str | None:
        action = getattr(view, "action", None)
        if action:
            return action

        kwargs = getattr(view, "kwargs", {}) or {}
        is_detail = "pk" in kwargs or "id" in kwargs

        method = request.method.upper()
        if method in ("GET", "HEAD", "OPTIONS"):
            return "retrieve" if is_detail else "list"
        if method == "POST":
            return "create"
        if method == "PUT":
            return "update"
        if method == "PATCH":
            return "partial_update"
        if method == "DELETE":
            return "destroy"
        return None

    def has_permission(self, request, view) -> bool:
        if not ensure_scope_on_request(request):
            return False

        user = request.user
        if not user or not getattr(user, "is_authenticated", False):
            return False

        roles = user_roles(user)

        if ROLE_ADMIN in roles:
            return True

        action = self._infer_action(request, view)
        allowed = self.allowed_roles_per_action.get(action)

        if allowed is None and request.method in SAFE_METHODS:
            kwargs = getattr(view, "kwargs", {}) or {}
            is_detail = "pk" in kwargs or "id" in kwargs
            allowed = self.allowed_roles_per_action.get("retrieve" if is_detail else "list")

        if allowed is not None:
            return bool(roles & allowed)

        return False

    def has_object_permission(self, request, view, obj) -> bool:
        return self.has_permission(request, view)


class PatientPermission(BaseRolePermission):
    """Patient registration and demographics"""
    allowed_roles_per_action = {
        "list": ALL_STAFF,
        "retrieve": ALL_STAFF,
        "create": {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE, ROLE_RECEPTION},
        "update": {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE, ROLE_RECEPTION},
        "partial_update": {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE, ROLE_RECEPTION},
        "destroy": {ROLE_ADMIN},
    }


class AppointmentPermission(BaseRolePermission):
    """Appointment booking, allocation and lifecycle"""
    allowed_roles_per_action = {
        "list": {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE, ROLE_RECEPTION, ROLE_READONLY},
        "retrieve": {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE, ROLE_RECEPTION, ROLE_READONLY},
        "create": {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE, ROLE_RECEPTION},
        "recurring": {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE, ROLE_RECEPTION},
        "auto_allocate": {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE, ROLE_RECEPTION},
        "slots": {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE, ROLE_RECEPTION, ROLE_READONLY},
        "set_status": {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE, ROLE_RECEPTION},
        "reschedule": {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE, ROLE_RECEPTION},
    }


class VitalsPermission(BaseRolePermission):
    """Vital signs are recorded by clinical staff"""
    allowed_roles_per_action = {
        "list": {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE, ROLE_READONLY},
        "retrieve": {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE, ROLE_READONLY},
        "create": CLINICAL,
    }


class TriagePermission(BaseRolePermission):
    """Triage queue is read-only"""
    allowed_roles_per_action = {
        "list": {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE, ROLE_RECEPTION, ROLE_READONLY},
        "queue": {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE, ROLE_RECEPTION, ROLE_READONLY},
    }


class VisitPermission(BaseRolePermission):
    """Consultation records"""
    allowed_roles_per_action = {
        "list": {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE, ROLE_READONLY},
        "retrieve": {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE, ROLE_READONLY},
        "create": {ROLE_ADMIN, ROLE_DOCTOR},
    }


class LabPermission(BaseRolePermission):
    """Lab orders, samples and results"""
    allowed_roles_per_action = {
        "list": {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE, ROLE_LAB, ROLE_FINANCE, ROLE_READONLY},
        "retrieve": {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE, ROLE_LAB, ROLE_FINANCE, ROLE_READONLY},
        "create": {ROLE_ADMIN, ROLE_DOCTOR},
        "advance": {ROLE_ADMIN, ROLE_LAB},
        "results": {ROLE_ADMIN, ROLE_LAB},
    }


class BillingPermission(BaseRolePermission):
    """Bills and payments"""
    allowed_roles_per_action = {
        "list": {ROLE_ADMIN, ROLE_RECEPTION, ROLE_FINANCE, ROLE_READONLY},
        "retrieve": {ROLE_ADMIN, ROLE_RECEPTION, ROLE_FINANCE, ROLE_READONLY},
        "create": {ROLE_ADMIN, ROLE_FINANCE},
        "payments": {ROLE_ADMIN, ROLE_RECEPTION, ROLE_FINANCE},
        "discount": {ROLE_ADMIN, ROLE_FINANCE},
    }


class LabTestTypePermission(BaseRolePermission):
    """Test catalogue: readable by clinical and lab staff, maintained by admins"""
    allowed_roles_per_action = {
        "list": {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE, ROLE_LAB, ROLE_FINANCE, ROLE_READONLY},
        "create": {ROLE_ADMIN},
    }


class PharmacyPermission(BaseRolePermission):
    """Medication catalogue, stock receipts and dispensing"""
    allowed_roles_per_action = {
        "list": ALL_STAFF,
        "retrieve": ALL_STAFF,
        "create": {ROLE_ADMIN, ROLE_PHARMACY},
        "receive_stock": {ROLE_ADMIN, ROLE_PHARMACY},
        "dispense": {ROLE_ADMIN, ROLE_PHARMACY},
    }


class DispensePermission(BaseRolePermission):
    """Dispensing log"""
    allowed_roles_per_action = {
        "list": {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE, ROLE_PHARMACY, ROLE_FINANCE, ROLE_READONLY},
        "retrieve": {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE, ROLE_PHARMACY, ROLE_FINANCE, ROLE_READONLY},
    }

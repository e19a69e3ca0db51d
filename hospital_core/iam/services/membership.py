# hospital_core/iam/services/membership.py
from __future__ import annotations

from uuid import UUID

from hospital_core.iam.models import HospitalMembership


def list_user_hospitals(user_id: int) -> list[dict]:
    """
    Hospital memberships for the /me response.
    """
    qs = (
        HospitalMembership.objects.select_related("hospital")
        .filter(user_id=user_id, is_active=True, hospital__is_active=True)
        .order_by("hospital__name")
    )

    return [
        {
            "hospital_id": str(m.hospital_id),
            "hospital_code": m.hospital.code,
            "hospital_name": m.hospital.name,
            "is_primary": m.is_primary,
        }
        for m in qs
    ]


def is_user_member_of_hospital(*, user_id: int, hospital_id: UUID) -> bool:
    """
    Single source of truth used by scope enforcement.
    """
    return HospitalMembership.objects.filter(
        is_active=True,
        user_id=user_id,
        hospital_id=hospital_id,
        hospital__is_active=True,
    ).exists()

# hospital_core/iam/api/me.py

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from hospital_core.common.permissions import user_roles
from hospital_core.iam.api.schema_serializers import MeResponseSerializer
from hospital_core.iam.scope import assert_user_membership, resolve_scope_from_headers
from hospital_core.iam.services.membership import list_user_hospitals


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: MeResponseSerializer}, tags=["IAM"])
    def get(self, request):
        """
        User info + hospital memberships.
        X-Hospital-Id is optional here; when sent it must be valid and the
        user must be a member (400/403 otherwise).
        """
        active_scope = None
        scope = resolve_scope_from_headers(request)
        if scope is not None:
            assert_user_membership(request.user, scope)
            active_scope = {"hospital_id": str(scope.hospital_id)}

        user = request.user
        return Response(
            {
                "user": {
                    "id": user.id,
                    "username": getattr(user, "username", None),
                    "email": getattr(user, "email", None),
                    "is_superuser": bool(getattr(user, "is_superuser", False)),
                    "roles": sorted(user_roles(user)),
                },
                "memberships": list_user_hospitals(user.id),
                "active_scope": active_scope,
            },
            status=status.HTTP_200_OK,
        )

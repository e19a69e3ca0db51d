# hospital_core/audit/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets

from hospital_core.audit.api.serializers import AuditEventSerializer
from hospital_core.audit.models import AuditEvent
from hospital_core.audit.selectors import list_audit_events
from hospital_core.common.api.params import uuid_param
from hospital_core.common.api.pagination import paginate
from hospital_core.common.context import require_context
from hospital_core.common.permissions import ROLE_ADMIN, BaseRolePermission


class AuditPermission(BaseRolePermission):
    allowed_roles_per_action = {"list": {ROLE_ADMIN}}


class AuditEventViewSet(viewsets.GenericViewSet):
    """
    List audit events for the current hospital.
    """
    permission_classes = [AuditPermission]
    serializer_class = AuditEventSerializer
    queryset = AuditEvent.objects.none()

    @extend_schema(
        tags=["Audit"],
        responses={200: AuditEventSerializer(many=True)},
        parameters=[
            OpenApiParameter("entity_type", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("entity_id", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("event_code", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        ctx = require_context(request)

        qs = list_audit_events(
            ctx=ctx,
            entity_type=request.query_params.get("entity_type") or None,
            entity_id=uuid_param(request, "entity_id"),
            event_code=request.query_params.get("event_code") or None,
        )
        return paginate(request, qs, AuditEventSerializer)

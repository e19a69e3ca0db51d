# hospital_core/triage/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from hospital_core.common.api.params import date_param
from hospital_core.common.context import require_context
from hospital_core.common.permissions import TriagePermission
from hospital_core.triage.api.serializers import TriageEntrySerializer
from hospital_core.triage.services import TriageService


class TriageViewSet(viewsets.ViewSet):
    permission_classes = [TriagePermission]
    serializer_class = TriageEntrySerializer

    @extend_schema(
        tags=["Triage"],
        parameters=[OpenApiParameter("date", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False)],
        responses={200: TriageEntrySerializer(many=True)},
    )
    @action(detail=False, methods=["get"], url_path="queue")
    def queue(self, request):
        """Priority-ordered queue for the day (default: today)."""
        ctx = require_context(request)
        entries = TriageService.build_queue(ctx=ctx, on_date=date_param(request))
        return Response(TriageEntrySerializer(entries, many=True).data, status=status.HTTP_200_OK)

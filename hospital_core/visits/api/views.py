# hospital_core/visits/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.response import Response

from hospital_core.common.api.params import date_param, uuid_param
from hospital_core.common.api.pagination import paginate
from hospital_core.common.api.routing import UUID_PATTERN
from hospital_core.common.context import require_context
from hospital_core.common.permissions import VisitPermission
from hospital_core.visits.api.serializers import VisitCreateSerializer, VisitSerializer
from hospital_core.visits.models import Visit
from hospital_core.visits.selectors import get_visit, list_visits
from hospital_core.visits.services import VisitService


class VisitViewSet(viewsets.ViewSet):
    permission_classes = [VisitPermission]
    lookup_value_regex = UUID_PATTERN

    serializer_class = VisitSerializer
    queryset = Visit.objects.none()

    @extend_schema(
        tags=["Visits"],
        parameters=[
            OpenApiParameter("patient", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("date", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
        ],
        responses={200: VisitSerializer(many=True)},
    )
    def list(self, request):
        ctx = require_context(request)

        qs = list_visits(ctx=ctx, patient_id=uuid_param(request, "patient"), on_date=date_param(request))
        return paginate(request, qs, VisitSerializer)

    @extend_schema(tags=["Visits"], responses={200: VisitSerializer})
    def retrieve(self, request, pk=None):
        ctx = require_context(request)
        visit = get_visit(ctx=ctx, visit_id=UUID(str(pk)))
        return Response(VisitSerializer(visit).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Visits"], request=VisitCreateSerializer, responses={201: VisitSerializer})
    def create(self, request):
        ctx = require_context(request)

        ser = VisitCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        visit = VisitService.record_visit(ctx=ctx, **ser.validated_data)
        return Response(VisitSerializer(get_visit(ctx=ctx, visit_id=visit.id)).data, status=status.HTTP_201_CREATED)

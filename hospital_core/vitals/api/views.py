# hospital_core/vitals/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.response import Response

from hospital_core.common.api.pagination import paginate
from hospital_core.common.api.params import date_param, uuid_param
from hospital_core.common.api.routing import UUID_PATTERN
from hospital_core.common.context import require_context
from hospital_core.common.permissions import VitalsPermission
from hospital_core.vitals.api.serializers import VitalSignsSerializer, VitalsInputSerializer
from hospital_core.vitals.models import VitalSigns
from hospital_core.vitals.selectors import get_vitals, list_vitals
from hospital_core.vitals.services import VitalsService


class VitalSignsViewSet(viewsets.ViewSet):
    """
    Vital signs are append-only: list, retrieve and create.
    """
    permission_classes = [VitalsPermission]
    lookup_value_regex = UUID_PATTERN

    serializer_class = VitalSignsSerializer
    queryset = VitalSigns.objects.none()

    @extend_schema(
        tags=["Vitals"],
        parameters=[
            OpenApiParameter("patient", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("date", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
        ],
        responses={200: VitalSignsSerializer(many=True)},
    )
    def list(self, request):
        ctx = require_context(request)
        qs = list_vitals(ctx=ctx, patient_id=uuid_param(request, "patient"), on_date=date_param(request))
        return paginate(request, qs, VitalSignsSerializer)

    @extend_schema(tags=["Vitals"], responses={200: VitalSignsSerializer})
    def retrieve(self, request, pk=None):
        ctx = require_context(request)
        vitals = get_vitals(ctx=ctx, vitals_id=UUID(str(pk)))
        return Response(VitalSignsSerializer(vitals).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Vitals"], request=VitalsInputSerializer, responses={201: VitalSignsSerializer})
    def create(self, request):
        ctx = require_context(request)

        ser = VitalsInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        vitals = VitalsService.record(ctx=ctx, **ser.validated_data)
        return Response(VitalSignsSerializer(vitals).data, status=status.HTTP_201_CREATED)

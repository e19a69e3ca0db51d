# hospital_core/patients/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.response import Response

from hospital_core.common.api.pagination import paginate
from hospital_core.common.api.routing import UUID_PATTERN
from hospital_core.common.context import require_context
from hospital_core.common.permissions import PatientPermission
from hospital_core.patients.api.serializers import (
    PatientCreateSerializer,
    PatientSerializer,
    PatientUpdateSerializer,
    RegistrationSerializer,
)
from hospital_core.patients.models import Patient
from hospital_core.patients.selectors import get_patient, search_patients
from hospital_core.patients.services import PatientService


class PatientViewSet(viewsets.ViewSet):
    permission_classes = [PatientPermission]
    lookup_value_regex = UUID_PATTERN

    serializer_class = PatientSerializer
    queryset = Patient.objects.none()

    @extend_schema(
        tags=["Patients"],
        parameters=[OpenApiParameter("q", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False)],
        responses={200: PatientSerializer(many=True)},
    )
    def list(self, request):
        ctx = require_context(request)
        qs = search_patients(ctx=ctx, q=request.query_params.get("q", ""))
        return paginate(request, qs, PatientSerializer)

    @extend_schema(tags=["Patients"], responses={200: PatientSerializer})
    def retrieve(self, request, pk=None):
        ctx = require_context(request)
        patient = get_patient(ctx=ctx, patient_id=UUID(str(pk)))
        return Response(PatientSerializer(patient).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Patients"], request=PatientCreateSerializer, responses={201: RegistrationSerializer})
    def create(self, request):
        """
        Register a patient. With auto scheduling on, the response also
        carries today's appointment, or a no_available_slot warning.
        """
        ctx = require_context(request)

        ser = PatientCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        registration = PatientService.register(ctx=ctx, **ser.validated_data)
        return Response(RegistrationSerializer(registration).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Patients"], request=PatientUpdateSerializer, responses={200: PatientSerializer})
    def partial_update(self, request, pk=None):
        ctx = require_context(request)

        ser = PatientUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        patient = PatientService.update_patient(ctx=ctx, patient_id=UUID(str(pk)), data=ser.validated_data)
        return Response(PatientSerializer(patient).data, status=status.HTTP_200_OK)

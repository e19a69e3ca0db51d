# hospital_core/pharmacy/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from hospital_core.common.api.pagination import paginate
from hospital_core.common.api.params import uuid_param
from hospital_core.common.api.routing import UUID_PATTERN
from hospital_core.common.context import require_context
from hospital_core.common.permissions import DispensePermission, PharmacyPermission
from hospital_core.hospitals.selectors import hospital_today
from hospital_core.pharmacy.api.serializers import (
    DispenseSerializer,
    MedicationCreateSerializer,
    MedicationDispenseSerializer,
    MedicationSerializer,
    MedicationStockSerializer,
    ReceiveStockSerializer,
)
from hospital_core.pharmacy.models import Medication, MedicationDispense
from hospital_core.pharmacy.selectors import (
    dispenses_filtered,
    get_dispense,
    get_medication,
    list_medications,
    list_stock,
)
from hospital_core.pharmacy.services import PharmacyService


class MedicationViewSet(viewsets.ViewSet):
    permission_classes = [PharmacyPermission]
    lookup_value_regex = UUID_PATTERN

    serializer_class = MedicationSerializer
    queryset = Medication.objects.none()

    def _medication_data(self, ctx, medication_id) -> dict:
        medication = get_medication(
            ctx=ctx,
            medication_id=medication_id,
            on_date=hospital_today(hospital_id=ctx.hospital_id),
        )
        return MedicationSerializer(medication).data

    @extend_schema(
        tags=["Pharmacy"],
        parameters=[
            OpenApiParameter("q", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("low_stock", OpenApiTypes.BOOL, OpenApiParameter.QUERY, required=False),
        ],
        responses={200: MedicationSerializer(many=True)},
    )
    def list(self, request):
        ctx = require_context(request)
        qs = list_medications(
            ctx=ctx,
            on_date=hospital_today(hospital_id=ctx.hospital_id),
            q=request.query_params.get("q", ""),
            low_stock_only=request.query_params.get("low_stock", "").lower() in ("true", "1", "yes"),
        )
        return paginate(request, qs, MedicationSerializer)

    @extend_schema(tags=["Pharmacy"], responses={200: MedicationSerializer})
    def retrieve(self, request, pk=None):
        ctx = require_context(request)
        data = self._medication_data(ctx, UUID(str(pk)))
        data["batches"] = MedicationStockSerializer(list_stock(ctx=ctx, medication_id=UUID(str(pk))), many=True).data
        return Response(data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Pharmacy"], request=MedicationCreateSerializer, responses={201: MedicationSerializer})
    def create(self, request):
        ctx = require_context(request)

        ser = MedicationCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        medication = PharmacyService.add_medication(ctx=ctx, **ser.validated_data)
        return Response(self._medication_data(ctx, medication.id), status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Pharmacy"], request=ReceiveStockSerializer, responses={201: MedicationStockSerializer})
    @action(detail=True, methods=["post"], url_path="receive-stock")
    def receive_stock(self, request, pk=None):
        ctx = require_context(request)

        ser = ReceiveStockSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        batch = PharmacyService.receive_stock(ctx=ctx, medication_id=UUID(str(pk)), **ser.validated_data)
        return Response(MedicationStockSerializer(batch).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Pharmacy"], request=DispenseSerializer, responses={201: MedicationDispenseSerializer})
    @action(detail=True, methods=["post"], url_path="dispense")
    def dispense(self, request, pk=None):
        """
        Dispense to a patient and raise the medication bill.
        409 insufficient_stock when usable batches can't cover the quantity.
        """
        ctx = require_context(request)

        ser = DispenseSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        dispense = PharmacyService.dispense(ctx=ctx, medication_id=UUID(str(pk)), **ser.validated_data)
        return Response(
            MedicationDispenseSerializer(get_dispense(ctx=ctx, dispense_id=dispense.id)).data,
            status=status.HTTP_201_CREATED,
        )


class MedicationDispenseViewSet(viewsets.ViewSet):
    permission_classes = [DispensePermission]
    lookup_value_regex = UUID_PATTERN

    serializer_class = MedicationDispenseSerializer
    queryset = MedicationDispense.objects.none()

    @extend_schema(
        tags=["Pharmacy"],
        parameters=[
            OpenApiParameter("patient", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("medication", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
        ],
        responses={200: MedicationDispenseSerializer(many=True)},
    )
    def list(self, request):
        ctx = require_context(request)
        qs = dispenses_filtered(
            ctx=ctx,
            patient_id=uuid_param(request, "patient"),
            medication_id=uuid_param(request, "medication"),
        )
        return paginate(request, qs, MedicationDispenseSerializer)

    @extend_schema(tags=["Pharmacy"], responses={200: MedicationDispenseSerializer})
    def retrieve(self, request, pk=None):
        ctx = require_context(request)
        dispense = get_dispense(ctx=ctx, dispense_id=UUID(str(pk)))
        return Response(MedicationDispenseSerializer(dispense).data, status=status.HTTP_200_OK)

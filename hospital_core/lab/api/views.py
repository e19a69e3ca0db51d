# hospital_core/lab/api/views.py
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
from hospital_core.common.permissions import LabPermission, LabTestTypePermission
from hospital_core.lab.api.serializers import (
    LabAdvanceSerializer,
    LabOrderCreateSerializer,
    LabOrderSerializer,
    LabResultCreateSerializer,
    LabResultSerializer,
    LabTestTypeCreateSerializer,
    LabTestTypeSerializer,
)
from hospital_core.lab.models import LabOrder, LabTestType
from hospital_core.lab.selectors import get_lab_order, lab_orders_filtered, list_test_types
from hospital_core.lab.services import LabService


class LabTestTypeViewSet(viewsets.ViewSet):
    permission_classes = [LabTestTypePermission]

    serializer_class = LabTestTypeSerializer
    queryset = LabTestType.objects.none()

    @extend_schema(tags=["Lab"], responses={200: LabTestTypeSerializer(many=True)})
    def list(self, request):
        ctx = require_context(request)
        return Response(LabTestTypeSerializer(list_test_types(ctx=ctx), many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Lab"], request=LabTestTypeCreateSerializer, responses={201: LabTestTypeSerializer})
    def create(self, request):
        ctx = require_context(request)

        ser = LabTestTypeCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        test_type = LabService.create_test_type(ctx=ctx, **ser.validated_data)
        return Response(LabTestTypeSerializer(test_type).data, status=status.HTTP_201_CREATED)


class LabOrderViewSet(viewsets.ViewSet):
    permission_classes = [LabPermission]
    lookup_value_regex = UUID_PATTERN

    serializer_class = LabOrderSerializer
    queryset = LabOrder.objects.none()

    @extend_schema(
        tags=["Lab"],
        parameters=[
            OpenApiParameter("status", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("patient", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
        ],
        responses={200: LabOrderSerializer(many=True)},
    )
    def list(self, request):
        ctx = require_context(request)
        qs = lab_orders_filtered(
            ctx=ctx,
            status=request.query_params.get("status") or None,
            patient_id=uuid_param(request, "patient"),
        )
        return paginate(request, qs, LabOrderSerializer)

    @extend_schema(tags=["Lab"], responses={200: LabOrderSerializer})
    def retrieve(self, request, pk=None):
        ctx = require_context(request)
        order = get_lab_order(ctx=ctx, order_id=UUID(str(pk)))
        return Response(LabOrderSerializer(order).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Lab"], request=LabOrderCreateSerializer, responses={201: LabOrderSerializer})
    def create(self, request):
        """Place an order; its bill is raised at the same time."""
        ctx = require_context(request)

        ser = LabOrderCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        order = LabService.place_order(ctx=ctx, **ser.validated_data)
        return Response(LabOrderSerializer(get_lab_order(ctx=ctx, order_id=order.id)).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Lab"], request=LabAdvanceSerializer, responses={200: LabOrderSerializer})
    @action(detail=True, methods=["post"], url_path="advance")
    def advance(self, request, pk=None):
        """
        Move to the next manual status. 402 payment_required while the
        bill is unpaid; 409 invalid_transition for a skipped or backward move.
        """
        ctx = require_context(request)

        ser = LabAdvanceSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        order = LabService.advance(
            ctx=ctx,
            order_id=UUID(str(pk)),
            target=ser.validated_data["status"],
            sample_condition=ser.validated_data["sample_condition"],
        )
        return Response(LabOrderSerializer(get_lab_order(ctx=ctx, order_id=order.id)).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Lab"], request=LabResultCreateSerializer, responses={201: LabResultSerializer})
    @action(detail=True, methods=["post"], url_path="results")
    def results(self, request, pk=None):
        ctx = require_context(request)

        ser = LabResultCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        result = LabService.enter_result(ctx=ctx, order_id=UUID(str(pk)), **ser.validated_data)
        return Response(LabResultSerializer(result).data, status=status.HTTP_201_CREATED)

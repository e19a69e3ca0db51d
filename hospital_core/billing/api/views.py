# hospital_core/billing/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from hospital_core.billing.api.serializers import (
    BillCreateSerializer,
    BillSerializer,
    DiscountSerializer,
    PaymentCreateSerializer,
    PaymentSerializer,
)
from hospital_core.billing.models import Bill
from hospital_core.billing.selectors import bills_filtered, get_bill
from hospital_core.billing.services import BillingService
from hospital_core.common.api.params import uuid_param
from hospital_core.common.api.pagination import paginate
from hospital_core.common.api.routing import UUID_PATTERN
from hospital_core.common.context import require_context
from hospital_core.common.permissions import BillingPermission
from hospital_core.patients.selectors import get_patient


def _bool_or_none(value: str | None, field_name: str) -> bool | None:
    if value is None or value == "":
        return None
    v = value.strip().lower()
    if v in ("true", "1", "yes"):
        return True
    if v in ("false", "0", "no"):
        return False
    raise ValidationError({field_name: "Expected true or false."})


class BillViewSet(viewsets.ViewSet):
    permission_classes = [BillingPermission]
    lookup_value_regex = UUID_PATTERN

    serializer_class = BillSerializer
    queryset = Bill.objects.none()

    @extend_schema(
        tags=["Billing"],
        parameters=[
            OpenApiParameter("patient", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("is_paid", OpenApiTypes.BOOL, OpenApiParameter.QUERY, required=False),
        ],
        responses={200: BillSerializer(many=True)},
    )
    def list(self, request):
        ctx = require_context(request)
        qs = bills_filtered(
            ctx=ctx,
            patient_id=uuid_param(request, "patient"),
            is_paid=_bool_or_none(request.query_params.get("is_paid"), "is_paid"),
        )
        return paginate(request, qs, BillSerializer)

    @extend_schema(tags=["Billing"], responses={200: BillSerializer})
    def retrieve(self, request, pk=None):
        ctx = require_context(request)
        bill = get_bill(ctx=ctx, bill_id=UUID(str(pk)))
        return Response(BillSerializer(bill).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Billing"], request=BillCreateSerializer, responses={201: BillSerializer})
    def create(self, request):
        """Ad-hoc bill (e.g. medication lines) outside visit/lab flows."""
        ctx = require_context(request)

        ser = BillCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        patient = get_patient(ctx=ctx, patient_id=ser.validated_data["patient_id"])
        bill = BillingService.create_bill(
            ctx=ctx,
            patient_id=patient.id,
            items=ser.validated_data["items"],
            description=ser.validated_data["description"],
        )
        return Response(BillSerializer(get_bill(ctx=ctx, bill_id=bill.id)).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Billing"], request=PaymentCreateSerializer, responses={201: PaymentSerializer})
    @action(detail=True, methods=["get", "post"], url_path="payments")
    def payments(self, request, pk=None):
        ctx = require_context(request)
        bill_id = UUID(str(pk))

        if request.method == "GET":
            bill = get_bill(ctx=ctx, bill_id=bill_id)
            return Response(
                PaymentSerializer(bill.payments.order_by("received_at"), many=True).data,
                status=status.HTTP_200_OK,
            )

        ser = PaymentCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        pay = BillingService.record_payment(ctx=ctx, bill_id=bill_id, **ser.validated_data)
        return Response(PaymentSerializer(pay).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Billing"], request=DiscountSerializer, responses={200: BillSerializer})
    @action(detail=True, methods=["post"], url_path="discount")
    def discount(self, request, pk=None):
        ctx = require_context(request)

        ser = DiscountSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        bill = BillingService.apply_discount(ctx=ctx, bill_id=UUID(str(pk)), **ser.validated_data)
        return Response(BillSerializer(get_bill(ctx=ctx, bill_id=bill.id)).data, status=status.HTTP_200_OK)

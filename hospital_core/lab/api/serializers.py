# hospital_core/lab/api/serializers.py
from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ObjectDoesNotExist
from rest_framework import serializers

from hospital_core.lab.models import (
    LabOrder,
    LabOrderPriority,
    LabOrderStatus,
    LabResult,
    LabSample,
    LabTestType,
)
from hospital_core.lab.workflow import MANUAL_TRANSITIONS, is_bill_settled


def _related_or_none(obj, name: str):
    try:
        return getattr(obj, name)
    except ObjectDoesNotExist:
        return None


class LabTestTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = LabTestType
        fields = ["id", "name", "code", "sample_type", "price", "is_active"]
        read_only_fields = ["id", "is_active"]


class LabSampleSerializer(serializers.ModelSerializer):
    class Meta:
        model = LabSample
        fields = ["id", "collected_at", "collected_by", "sample_condition"]
        read_only_fields = fields


class LabResultSerializer(serializers.ModelSerializer):
    class Meta:
        model = LabResult
        fields = [
            "id",
            "order",
            "result_value",
            "reference_range",
            "is_abnormal",
            "is_critical",
            "comments",
            "tested_by",
            "tested_at",
        ]
        read_only_fields = fields


class LabOrderSerializer(serializers.ModelSerializer):
    patient_name = serializers.CharField(source="patient.full_name", read_only=True)
    test_name = serializers.CharField(source="test_type.name", read_only=True)
    bill_id = serializers.SerializerMethodField()
    is_paid = serializers.SerializerMethodField()
    next_status = serializers.SerializerMethodField()
    sample = serializers.SerializerMethodField()
    result = serializers.SerializerMethodField()

    class Meta:
        model = LabOrder
        fields = [
            "id",
            "hospital_id",
            "patient",
            "patient_name",
            "test_type",
            "test_name",
            "visit",
            "doctor",
            "priority",
            "status",
            "next_status",
            "clinical_notes",
            "order_date",
            "bill_id",
            "is_paid",
            "sample",
            "result",
        ]
        read_only_fields = fields

    def get_bill_id(self, obj):
        bill = _related_or_none(obj, "bill")
        return str(bill.id) if bill else None

    def get_is_paid(self, obj) -> bool:
        return is_bill_settled(_related_or_none(obj, "bill"))

    def get_next_status(self, obj):
        return MANUAL_TRANSITIONS.get(obj.status)

    def get_sample(self, obj):
        sample = _related_or_none(obj, "sample")
        return LabSampleSerializer(sample).data if sample else None

    def get_result(self, obj):
        result = _related_or_none(obj, "result")
        return LabResultSerializer(result).data if result else None


class LabOrderCreateSerializer(serializers.Serializer):
    patient_id = serializers.UUIDField()
    test_type_id = serializers.UUIDField()
    visit_id = serializers.UUIDField(required=False, allow_null=True)
    priority = serializers.ChoiceField(choices=LabOrderPriority.choices, default=LabOrderPriority.ROUTINE)
    clinical_notes = serializers.CharField(required=False, allow_blank=True, default="")


class LabTestTypeCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    code = serializers.SlugField(max_length=64)
    sample_type = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.00"))


class LabAdvanceSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[LabOrderStatus.SAMPLE_COLLECTED, LabOrderStatus.IN_PROGRESS])
    sample_condition = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")


class LabResultCreateSerializer(serializers.Serializer):
    result_value = serializers.CharField()
    reference_range = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")
    is_abnormal = serializers.BooleanField(required=False, default=False)
    is_critical = serializers.BooleanField(required=False, default=False)
    comments = serializers.CharField(required=False, allow_blank=True, default="")

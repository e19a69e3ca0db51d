# hospital_core/pharmacy/api/serializers.py
from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from hospital_core.pharmacy.models import (
    DispensedBatch,
    Medication,
    MedicationDispense,
    MedicationForm,
    MedicationStock,
)
from hospital_core.pharmacy.stock import is_low_stock


class MedicationSerializer(serializers.ModelSerializer):
    """Expects the queryset annotated with on_hand (see pharmacy.selectors)."""
    on_hand = serializers.IntegerField(read_only=True)
    low_stock = serializers.SerializerMethodField()

    class Meta:
        model = Medication
        fields = [
            "id",
            "name",
            "generic_name",
            "dosage",
            "form",
            "category",
            "manufacturer",
            "unit_price",
            "reorder_point",
            "on_hand",
            "low_stock",
            "is_active",
        ]
        read_only_fields = fields

    def get_low_stock(self, obj) -> bool:
        return is_low_stock(obj.on_hand, obj.reorder_point)


class MedicationStockSerializer(serializers.ModelSerializer):
    total_cost = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = MedicationStock
        fields = [
            "id",
            "medication",
            "batch_number",
            "quantity_received",
            "quantity_on_hand",
            "unit_cost",
            "total_cost",
            "expiry_date",
            "supplier",
            "received_by",
            "received_at",
        ]
        read_only_fields = fields


class DispensedBatchSerializer(serializers.ModelSerializer):
    batch_number = serializers.CharField(source="stock.batch_number", read_only=True)

    class Meta:
        model = DispensedBatch
        fields = ["stock", "batch_number", "quantity"]
        read_only_fields = fields


class MedicationDispenseSerializer(serializers.ModelSerializer):
    medication_name = serializers.CharField(source="medication.name", read_only=True)
    patient_name = serializers.CharField(source="patient.full_name", read_only=True)
    batches = DispensedBatchSerializer(many=True, read_only=True)

    class Meta:
        model = MedicationDispense
        fields = [
            "id",
            "hospital_id",
            "medication",
            "medication_name",
            "patient",
            "patient_name",
            "visit",
            "bill",
            "quantity",
            "batches",
            "notes",
            "dispensed_by",
            "dispensed_at",
        ]
        read_only_fields = fields


class MedicationCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    dosage = serializers.CharField(max_length=64)
    form = serializers.ChoiceField(choices=MedicationForm.choices, default=MedicationForm.TABLET)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.00"))
    generic_name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    category = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    manufacturer = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    reorder_point = serializers.IntegerField(min_value=0, required=False, default=10)


class ReceiveStockSerializer(serializers.Serializer):
    batch_number = serializers.CharField(max_length=64)
    quantity_received = serializers.IntegerField(min_value=1)
    expiry_date = serializers.DateField()
    unit_cost = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00"), required=False, default=Decimal("0.00")
    )
    supplier = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class DispenseSerializer(serializers.Serializer):
    patient_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    stock_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    visit_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(required=False, allow_blank=True, default="")

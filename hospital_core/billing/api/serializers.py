# hospital_core/billing/api/serializers.py
from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from hospital_core.billing.models import Bill, BillItem, ItemType, Payment, PaymentMethod


class BillItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = BillItem
        fields = ["id", "item_type", "description", "quantity", "unit_price", "line_total"]
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = ["id", "bill", "amount", "method", "reference", "received_by", "received_at"]
        read_only_fields = fields


class BillSerializer(serializers.ModelSerializer):
    items = BillItemSerializer(many=True, read_only=True)
    balance_due = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Bill
        fields = [
            "id",
            "hospital_id",
            "patient",
            "visit",
            "lab_order",
            "description",
            "amount",
            "discount_amount",
            "discount_reason",
            "amount_paid",
            "balance_due",
            "is_paid",
            "paid_at",
            "payment_method",
            "items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BillItemInputSerializer(serializers.Serializer):
    item_type = serializers.ChoiceField(choices=ItemType.choices, default=ItemType.SERVICE)
    description = serializers.CharField(max_length=255)
    quantity = serializers.IntegerField(min_value=1, default=1)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.00"))


class BillCreateSerializer(serializers.Serializer):
    patient_id = serializers.UUIDField()
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    items = BillItemInputSerializer(many=True)


class PaymentCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    reference = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")


class DiscountSerializer(serializers.Serializer):
    discount_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")

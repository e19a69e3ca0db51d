# hospital_core/billing/models.py
from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models

from hospital_core.common.models import ScopedModel


class ItemType(models.TextChoices):
    SERVICE = "service", "Service"
    MEDICATION = "medication", "Medication"
    LAB = "lab", "Lab"


class PaymentMethod(models.TextChoices):
    CASH = "cash", "Cash"
    CARD = "card", "Card"
    TRANSFER = "transfer", "Bank transfer"
    INSURANCE = "insurance", "Insurance"


class Bill(ScopedModel):
    """
    What a patient owes for a visit or a lab order.

    amount is the net payable (line totals minus discount). The bill is
    settled once amount_paid >= amount; that is also the lab payment gate.
    """
    patient = models.ForeignKey("patients.Patient", on_delete=models.PROTECT, related_name="bills")
    visit = models.ForeignKey(
        "visits.Visit",
        on_delete=models.PROTECT,
        related_name="bills",
        null=True,
        blank=True,
    )
    lab_order = models.OneToOneField(
        "lab.LabOrder",
        on_delete=models.PROTECT,
        related_name="bill",
        null=True,
        blank=True,
    )

    description = models.CharField(max_length=255, blank=True, default="")

    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount_reason = models.CharField(max_length=255, blank=True, default="")
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    is_paid = models.BooleanField(default=False, db_index=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    payment_method = models.CharField(max_length=16, choices=PaymentMethod.choices, blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_bills",
    )

    class Meta:
        db_table = "billing_bill"
        indexes = [
            models.Index(fields=["hospital_id", "is_paid", "created_at"]),
            models.Index(fields=["hospital_id", "patient", "created_at"]),
        ]

    @property
    def gross_amount(self) -> Decimal:
        return self.amount + self.discount_amount

    @property
    def balance_due(self) -> Decimal:
        return max(self.amount - self.amount_paid, Decimal("0.00"))

    def __str__(self) -> str:
        return f"Bill {self.id} ({self.amount_paid}/{self.amount})"


class BillItem(ScopedModel):
    bill = models.ForeignKey(Bill, on_delete=models.CASCADE, related_name="items")

    item_type = models.CharField(max_length=16, choices=ItemType.choices, default=ItemType.SERVICE)
    description = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    line_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        db_table = "billing_bill_item"
        indexes = [
            models.Index(fields=["hospital_id", "bill"]),
        ]


class Payment(ScopedModel):
    bill = models.ForeignKey(Bill, on_delete=models.PROTECT, related_name="payments")

    amount = models.DecimalField(max_digits=12, decimal_places=2)
    method = models.CharField(max_length=16, choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    reference = models.CharField(max_length=128, blank=True, default="")

    received_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="received_payments",
    )
    received_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = "billing_payment"
        indexes = [
            models.Index(fields=["hospital_id", "bill", "received_at"]),
        ]

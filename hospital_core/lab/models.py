# hospital_core/lab/models.py
from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from hospital_core.common.models import ScopedModel


class LabOrderStatus(models.TextChoices):
    ORDERED = "ordered", "Ordered"
    SAMPLE_COLLECTED = "sample_collected", "Sample collected"
    IN_PROGRESS = "in_progress", "In progress"
    COMPLETED = "completed", "Completed"


class LabOrderPriority(models.TextChoices):
    ROUTINE = "routine", "Routine"
    URGENT = "urgent", "Urgent"
    STAT = "stat", "STAT"


class LabTestType(ScopedModel):
    """Test catalogue entry; price is what the order's bill charges."""
    name = models.CharField(max_length=255)
    code = models.SlugField(max_length=64)
    sample_type = models.CharField(max_length=64, blank=True, default="")  # blood, urine, ...
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "lab_test_type"
        constraints = [
            models.UniqueConstraint(fields=["hospital_id", "code"], name="uq_lab_test_type_code"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"


class LabOrder(ScopedModel):
    patient = models.ForeignKey("patients.Patient", on_delete=models.PROTECT, related_name="lab_orders")
    test_type = models.ForeignKey(LabTestType, on_delete=models.PROTECT, related_name="orders")
    visit = models.ForeignKey(
        "visits.Visit",
        on_delete=models.PROTECT,
        related_name="lab_orders",
        null=True,
        blank=True,
    )
    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="lab_orders",
    )

    priority = models.CharField(max_length=16, choices=LabOrderPriority.choices, default=LabOrderPriority.ROUTINE)
    status = models.CharField(
        max_length=32,
        choices=LabOrderStatus.choices,
        default=LabOrderStatus.ORDERED,
        db_index=True,
    )
    clinical_notes = models.TextField(blank=True, default="")
    order_date = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = "lab_order"
        indexes = [
            models.Index(fields=["hospital_id", "status", "order_date"]),
            models.Index(fields=["hospital_id", "patient", "order_date"]),
        ]

    def __str__(self) -> str:
        return f"{self.test_type_id} for {self.patient_id} ({self.status})"


class LabSample(ScopedModel):
    order = models.OneToOneField(LabOrder, on_delete=models.CASCADE, related_name="sample")
    collected_at = models.DateTimeField(default=timezone.now)
    collected_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="collected_lab_samples",
    )
    sample_condition = models.CharField(max_length=64, blank=True, default="")

    class Meta:
        db_table = "lab_sample"


class LabResult(ScopedModel):
    order = models.OneToOneField(LabOrder, on_delete=models.CASCADE, related_name="result")

    result_value = models.TextField()
    reference_range = models.CharField(max_length=128, blank=True, default="")
    is_abnormal = models.BooleanField(default=False)
    is_critical = models.BooleanField(default=False)
    comments = models.TextField(blank=True, default="")

    tested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="lab_results",
    )
    tested_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "lab_result"

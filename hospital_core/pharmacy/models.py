# hospital_core/pharmacy/models.py
from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from hospital_core.common.models import ScopedModel


class MedicationForm(models.TextChoices):
    TABLET = "tablet", "Tablet"
    CAPSULE = "capsule", "Capsule"
    SYRUP = "syrup", "Syrup"
    INJECTION = "injection", "Injection"
    CREAM = "cream", "Cream"
    DROPS = "drops", "Drops"
    INHALER = "inhaler", "Inhaler"
    OTHER = "other", "Other"


class Medication(ScopedModel):
    """
    Formulary entry. Stock lives in MedicationStock batches; unit_price is
    what a dispense bills per unit.
    """
    name = models.CharField(max_length=255)
    generic_name = models.CharField(max_length=255, blank=True, default="")
    dosage = models.CharField(max_length=64)  # "500mg", "5ml", ...
    form = models.CharField(max_length=16, choices=MedicationForm.choices, default=MedicationForm.TABLET)
    category = models.CharField(max_length=64, blank=True, default="")
    manufacturer = models.CharField(max_length=255, blank=True, default="")

    unit_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    reorder_point = models.PositiveIntegerField(default=10)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "pharmacy_medication"
        constraints = [
            models.UniqueConstraint(
                fields=["hospital_id", "name", "dosage", "form"],
                name="uq_medication_name_dosage_form",
            ),
        ]
        indexes = [
            models.Index(fields=["hospital_id", "name"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} {self.dosage} ({self.form})"


class MedicationStock(ScopedModel):
    """One received batch. quantity_on_hand only goes down, by dispensing."""
    medication = models.ForeignKey(Medication, on_delete=models.PROTECT, related_name="stock")

    batch_number = models.CharField(max_length=64)
    quantity_received = models.PositiveIntegerField()
    quantity_on_hand = models.PositiveIntegerField()
    unit_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    expiry_date = models.DateField(db_index=True)
    supplier = models.CharField(max_length=255, blank=True, default="")

    received_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="received_medication_stock",
    )
    received_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "pharmacy_medication_stock"
        constraints = [
            models.UniqueConstraint(
                fields=["hospital_id", "medication", "batch_number"],
                name="uq_medication_stock_batch",
            ),
        ]
        indexes = [
            models.Index(fields=["hospital_id", "medication", "expiry_date"]),
        ]

    @property
    def total_cost(self) -> Decimal:
        return self.unit_cost * self.quantity_received

    def __str__(self) -> str:
        return f"{self.medication_id} batch {self.batch_number} ({self.quantity_on_hand})"


class MedicationDispense(ScopedModel):
    medication = models.ForeignKey(Medication, on_delete=models.PROTECT, related_name="dispenses")
    patient = models.ForeignKey("patients.Patient", on_delete=models.PROTECT, related_name="medication_dispenses")
    visit = models.ForeignKey(
        "visits.Visit",
        on_delete=models.PROTECT,
        related_name="medication_dispenses",
        null=True,
        blank=True,
    )
    bill = models.OneToOneField(
        "billing.Bill",
        on_delete=models.PROTECT,
        related_name="medication_dispense",
        null=True,
        blank=True,
    )

    quantity = models.PositiveIntegerField()
    notes = models.TextField(blank=True, default="")

    dispensed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="medication_dispenses",
    )
    dispensed_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = "pharmacy_medication_dispense"
        indexes = [
            models.Index(fields=["hospital_id", "patient", "dispensed_at"]),
            models.Index(fields=["hospital_id", "medication", "dispensed_at"]),
        ]


class DispensedBatch(ScopedModel):
    """How many units of a dispense came out of which batch."""
    dispense = models.ForeignKey(MedicationDispense, on_delete=models.CASCADE, related_name="batches")
    stock = models.ForeignKey(MedicationStock, on_delete=models.PROTECT, related_name="dispensed")
    quantity = models.PositiveIntegerField()

    class Meta:
        db_table = "pharmacy_dispensed_batch"

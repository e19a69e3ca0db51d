# hospital_core/vitals/models.py
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from hospital_core.common.models import ScopedModel


class VitalSigns(ScopedModel):
    """
    One vital-signs snapshot. Append-only: a correction is a new record.

    Measurements are floats so band comparisons in triage scoring are
    plain numeric comparisons. Null means "not measured".
    """
    patient = models.ForeignKey("patients.Patient", on_delete=models.PROTECT, related_name="vital_signs")
    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="recorded_vitals",
    )
    recorded_at = models.DateTimeField(default=timezone.now, db_index=True)

    body_temperature = models.FloatField(null=True, blank=True)  # °C
    heart_rate = models.FloatField(null=True, blank=True)  # bpm
    blood_pressure_systolic = models.FloatField(null=True, blank=True)  # mmHg
    blood_pressure_diastolic = models.FloatField(null=True, blank=True)  # mmHg
    oxygen_saturation = models.FloatField(null=True, blank=True)  # %
    weight = models.FloatField(null=True, blank=True)  # kg

    complaints = models.TextField(blank=True, default="")

    class Meta:
        db_table = "vitals_vital_signs"
        indexes = [
            models.Index(fields=["hospital_id", "recorded_at"]),
            models.Index(fields=["hospital_id", "patient", "recorded_at"]),
        ]

    def __str__(self):
        return f"{self.patient_id} @ {self.recorded_at}"

    def save(self, *args, **kwargs):
        # UUID PK exists even before first save, so use _state.adding
        if not self._state.adding:
            raise ValidationError("VitalSigns records are immutable once created.")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("VitalSigns records cannot be deleted.")

# hospital_core/visits/models.py
from django.conf import settings
from django.db import models

from hospital_core.common.models import ScopedModel


class Visit(ScopedModel):
    """
    A doctor's consultation. Recording one completes the patient's
    appointment and raises the consultation bill.
    """
    patient = models.ForeignKey("patients.Patient", on_delete=models.PROTECT, related_name="visits")
    appointment = models.OneToOneField(
        "appointments.Appointment",
        on_delete=models.PROTECT,
        related_name="visit",
        null=True,
        blank=True,
    )
    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="visits",
    )

    visit_date = models.DateField(db_index=True)

    chief_complaint = models.TextField(blank=True, default="")
    diagnosis = models.TextField(blank=True, default="")
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "visits_visit"
        indexes = [
            models.Index(fields=["hospital_id", "visit_date"]),
            models.Index(fields=["hospital_id", "patient", "visit_date"]),
        ]

    def __str__(self) -> str:
        return f"Visit {self.patient_id} on {self.visit_date}"

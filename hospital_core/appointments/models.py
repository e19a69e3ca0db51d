# hospital_core/appointments/models.py
from django.conf import settings
from django.db import models
from django.db.models import Q

from hospital_core.common.models import ScopedModel


class Appointment(ScopedModel):
    """
    A patient booked into one 15-minute slot of a hospital's day.

    The partial unique constraint is the authoritative double-booking guard:
    two live (non-cancelled) rows can never share a hospital/date/start.
    """

    class Status(models.TextChoices):
        SCHEDULED = "scheduled", "Scheduled"
        ARRIVED = "arrived", "Arrived"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"

    patient = models.ForeignKey("patients.Patient", on_delete=models.PROTECT, related_name="appointments")
    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="doctor_appointments",
    )

    scheduled_date = models.DateField(db_index=True)
    start_time = models.TimeField()
    end_time = models.TimeField()

    status = models.CharField(max_length=16, choices=Status.choices, default=Status.SCHEDULED, db_index=True)
    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_appointments",
    )

    # Shared by every row created from one recurring request.
    recurrence_group = models.UUIDField(null=True, blank=True, db_index=True)

    class Meta:
        db_table = "appointments_appointment"
        constraints = [
            models.UniqueConstraint(
                fields=["hospital_id", "scheduled_date", "start_time"],
                condition=~Q(status="cancelled"),
                name="uq_appointment_hospital_slot",
            ),
        ]
        indexes = [
            models.Index(fields=["hospital_id", "scheduled_date", "status"]),
            models.Index(fields=["hospital_id", "patient", "scheduled_date"]),
        ]
        ordering = ["scheduled_date", "start_time"]

    def __str__(self) -> str:
        return f"{self.patient_id} {self.scheduled_date} {self.start_time:%H:%M} ({self.status})"

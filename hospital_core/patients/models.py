# hospital_core/patients/models.py
from django.conf import settings
from django.db import models

from hospital_core.common.models import ScopedModel


class Patient(ScopedModel):
    """
    Patient registered by (and owned by) one hospital.

    Identity fields are fixed once created; contact and medical fields
    can be updated (see PatientService.update_patient).
    """

    class Gender(models.TextChoices):
        MALE = "male", "Male"
        FEMALE = "female", "Female"
        OTHER = "other", "Other"

    first_name = models.CharField(max_length=128)
    last_name = models.CharField(max_length=128)
    date_of_birth = models.DateField()
    gender = models.CharField(max_length=16, choices=Gender.choices)

    phone = models.CharField(max_length=32, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.CharField(max_length=255, blank=True, default="")
    emergency_contact = models.CharField(max_length=255, blank=True, default="")

    blood_group = models.CharField(max_length=8, blank=True, default="")
    allergies = models.TextField(blank=True, default="")

    registered_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="registered_patients",
    )

    IDENTITY_FIELDS = ("first_name", "last_name", "date_of_birth", "gender")

    class Meta:
        db_table = "patients_patient"
        indexes = [
            models.Index(fields=["hospital_id", "last_name", "first_name"]),
            models.Index(fields=["hospital_id", "phone"]),
        ]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self) -> str:
        return self.full_name

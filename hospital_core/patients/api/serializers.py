# hospital_core/patients/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from hospital_core.appointments.api.serializers import AppointmentSerializer
from hospital_core.patients.models import Patient


class PatientCreateSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=128)
    last_name = serializers.CharField(max_length=128)
    date_of_birth = serializers.DateField()
    gender = serializers.ChoiceField(choices=Patient.Gender.choices)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    address = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    emergency_contact = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    blood_group = serializers.CharField(max_length=8, required=False, allow_blank=True, default="")
    allergies = serializers.CharField(required=False, allow_blank=True, default="")

    # None -> hospital setting
    auto_schedule = serializers.BooleanField(required=False, allow_null=True, default=None)


class PatientUpdateSerializer(serializers.Serializer):
    """
    Partial update contract (PATCH). Identity fields are accepted here so
    the service can reject them explicitly.
    """
    first_name = serializers.CharField(max_length=128, required=False)
    last_name = serializers.CharField(max_length=128, required=False)
    date_of_birth = serializers.DateField(required=False)
    gender = serializers.CharField(max_length=16, required=False)

    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True)
    emergency_contact = serializers.CharField(max_length=255, required=False, allow_blank=True)
    blood_group = serializers.CharField(max_length=8, required=False, allow_blank=True)
    allergies = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class PatientSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = Patient
        fields = [
            "id",
            "hospital_id",
            "first_name",
            "last_name",
            "full_name",
            "date_of_birth",
            "gender",
            "phone",
            "email",
            "address",
            "emergency_contact",
            "blood_group",
            "allergies",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class RegistrationSerializer(serializers.Serializer):
    patient = PatientSerializer()
    appointment = AppointmentSerializer(allow_null=True)
    warnings = serializers.ListField(child=serializers.DictField())

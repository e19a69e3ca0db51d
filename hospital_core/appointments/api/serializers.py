# hospital_core/appointments/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from hospital_core.appointments.models import Appointment
from hospital_core.appointments.recurrence import Frequency
from hospital_core.appointments.slots import parse_slot


class SlotField(serializers.Field):
    """Reads "HH:MM" or "HH:MM:SS", writes "HH:MM"."""

    default_error_messages = {"invalid": "Time must be HH:MM or HH:MM:SS."}

    def to_internal_value(self, data):
        try:
            return parse_slot(data)
        except (TypeError, ValueError):
            self.fail("invalid")

    def to_representation(self, value):
        return value.strftime("%H:%M")


class AppointmentSerializer(serializers.ModelSerializer):
    patient_name = serializers.CharField(source="patient.full_name", read_only=True)
    start_time = SlotField(read_only=True)
    end_time = SlotField(read_only=True)

    class Meta:
        model = Appointment
        fields = [
            "id",
            "hospital_id",
            "patient",
            "patient_name",
            "doctor",
            "scheduled_date",
            "start_time",
            "end_time",
            "status",
            "notes",
            "created_by",
            "recurrence_group",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AppointmentCreateSerializer(serializers.Serializer):
    patient_id = serializers.UUIDField()
    scheduled_date = serializers.DateField()
    start_time = SlotField()
    doctor_id = serializers.IntegerField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class RecurringAppointmentSerializer(serializers.Serializer):
    patient_id = serializers.UUIDField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    frequency = serializers.ChoiceField(choices=[f.value for f in Frequency])
    start_time = SlotField()
    doctor_id = serializers.IntegerField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class AutoAllocateSerializer(serializers.Serializer):
    patient_id = serializers.UUIDField()
    date = serializers.DateField(required=False)


class AppointmentStatusSerializer(serializers.Serializer):
    """Manual moves only; completion happens by recording a visit."""
    status = serializers.ChoiceField(choices=[Appointment.Status.ARRIVED, Appointment.Status.CANCELLED])


class RescheduleSerializer(serializers.Serializer):
    scheduled_date = serializers.DateField()
    start_time = SlotField()


class SlotAvailabilitySerializer(serializers.Serializer):
    start_time = serializers.CharField()
    end_time = serializers.CharField()
    available = serializers.BooleanField()

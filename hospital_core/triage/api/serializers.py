from rest_framework import serializers

from hospital_core.appointments.api.serializers import AppointmentSerializer
from hospital_core.vitals.api.serializers import VitalSignsSerializer


class TriageEntrySerializer(serializers.Serializer):
    position = serializers.IntegerField()
    patient_id = serializers.UUIDField()
    patient_name = serializers.CharField(source="vitals.patient.full_name")
    priority_score = serializers.IntegerField()
    priority_level = serializers.CharField()
    vitals = VitalSignsSerializer()
    appointment = AppointmentSerializer(allow_null=True)

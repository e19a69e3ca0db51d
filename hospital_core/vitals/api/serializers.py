# hospital_core/vitals/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from hospital_core.triage.scoring import priority_level, priority_score
from hospital_core.vitals.models import VitalSigns
from hospital_core.vitals.services import MEASUREMENT_FIELDS


class VitalsInputSerializer(serializers.Serializer):
    patient_id = serializers.UUIDField()
    recorded_at = serializers.DateTimeField(required=False)

    # Plausibility ranges only; clinical bands live in triage scoring.
    body_temperature = serializers.FloatField(required=False, allow_null=True, min_value=25, max_value=45)
    heart_rate = serializers.FloatField(required=False, allow_null=True, min_value=0, max_value=300)
    blood_pressure_systolic = serializers.FloatField(required=False, allow_null=True, min_value=0, max_value=300)
    blood_pressure_diastolic = serializers.FloatField(required=False, allow_null=True, min_value=0, max_value=200)
    oxygen_saturation = serializers.FloatField(required=False, allow_null=True, min_value=0, max_value=100)
    weight = serializers.FloatField(required=False, allow_null=True, min_value=0, max_value=500)

    complaints = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if all(attrs.get(f) is None for f in MEASUREMENT_FIELDS) and not attrs.get("complaints"):
            raise serializers.ValidationError("At least one vital sign or a complaint is required.")
        return attrs


class VitalSignsSerializer(serializers.ModelSerializer):
    priority_score = serializers.SerializerMethodField()
    priority_level = serializers.SerializerMethodField()

    class Meta:
        model = VitalSigns
        fields = [
            "id",
            "hospital_id",
            "patient",
            "recorded_by",
            "recorded_at",
            "body_temperature",
            "heart_rate",
            "blood_pressure_systolic",
            "blood_pressure_diastolic",
            "oxygen_saturation",
            "weight",
            "complaints",
            "priority_score",
            "priority_level",
            "created_at",
        ]
        read_only_fields = fields

    def get_priority_score(self, obj) -> int:
        return priority_score(obj)

    def get_priority_level(self, obj) -> str:
        return priority_level(priority_score(obj))

from rest_framework import serializers

from hospital_core.billing.api.serializers import BillItemInputSerializer, BillSerializer
from hospital_core.visits.models import Visit


class VisitSerializer(serializers.ModelSerializer):
    bills = BillSerializer(many=True, read_only=True)

    class Meta:
        model = Visit
        fields = [
            "id",
            "hospital_id",
            "patient",
            "appointment",
            "doctor",
            "visit_date",
            "chief_complaint",
            "diagnosis",
            "notes",
            "bills",
            "created_at",
        ]
        read_only_fields = fields


class VisitCreateSerializer(serializers.Serializer):
    patient_id = serializers.UUIDField()
    appointment_id = serializers.UUIDField(required=False, allow_null=True)
    chief_complaint = serializers.CharField(required=False, allow_blank=True, default="")
    diagnosis = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    extra_items = BillItemInputSerializer(many=True, required=False, default=list)

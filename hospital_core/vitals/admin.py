from django.contrib import admin

from hospital_core.vitals.models import VitalSigns


@admin.register(VitalSigns)
class VitalSignsAdmin(admin.ModelAdmin):
    list_display = (
        "patient",
        "recorded_at",
        "body_temperature",
        "heart_rate",
        "blood_pressure_systolic",
        "blood_pressure_diastolic",
        "oxygen_saturation",
        "hospital_id",
    )
    list_filter = ("hospital_id",)
    ordering = ("-recorded_at",)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

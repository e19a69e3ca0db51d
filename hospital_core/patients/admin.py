from django.contrib import admin

from hospital_core.patients.models import Patient


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ("last_name", "first_name", "date_of_birth", "gender", "phone", "hospital_id", "created_at")
    list_filter = ("gender", "hospital_id")
    search_fields = ("first_name", "last_name", "phone", "email")
    ordering = ("-created_at",)

    def get_readonly_fields(self, request, obj=None):
        if obj is not None:
            return Patient.IDENTITY_FIELDS
        return ()

from django.contrib import admin

from hospital_core.visits.models import Visit


@admin.register(Visit)
class VisitAdmin(admin.ModelAdmin):
    list_display = ("patient", "visit_date", "doctor", "appointment", "hospital_id")
    list_filter = ("visit_date", "hospital_id")
    search_fields = ("patient__first_name", "patient__last_name", "diagnosis")

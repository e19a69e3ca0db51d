from django.contrib import admin

from hospital_core.appointments.models import Appointment


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ("patient", "scheduled_date", "start_time", "end_time", "status", "hospital_id")
    list_filter = ("status", "scheduled_date", "hospital_id")
    search_fields = ("patient__first_name", "patient__last_name", "notes")
    ordering = ("-scheduled_date", "start_time")

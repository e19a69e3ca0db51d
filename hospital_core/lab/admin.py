from django.contrib import admin

from hospital_core.lab.models import LabOrder, LabResult, LabSample, LabTestType


@admin.register(LabTestType)
class LabTestTypeAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "sample_type", "price", "is_active", "hospital_id")
    list_filter = ("is_active", "hospital_id")
    search_fields = ("name", "code")


@admin.register(LabOrder)
class LabOrderAdmin(admin.ModelAdmin):
    list_display = ("patient", "test_type", "priority", "status", "order_date", "hospital_id")
    list_filter = ("status", "priority", "hospital_id")
    # status moves go through LabService so the payment gate applies
    readonly_fields = ("status",)


admin.site.register(LabSample)
admin.site.register(LabResult)

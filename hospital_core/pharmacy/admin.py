from django.contrib import admin

from hospital_core.pharmacy.models import DispensedBatch, Medication, MedicationDispense, MedicationStock


class MedicationStockInline(admin.TabularInline):
    model = MedicationStock
    extra = 0
    can_delete = False
    fields = ("batch_number", "quantity_received", "quantity_on_hand", "expiry_date", "supplier")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Medication)
class MedicationAdmin(admin.ModelAdmin):
    list_display = ("name", "dosage", "form", "unit_price", "reorder_point", "is_active", "hospital_id")
    list_filter = ("form", "is_active", "hospital_id")
    search_fields = ("name", "generic_name", "category")
    inlines = [MedicationStockInline]


class DispensedBatchInline(admin.TabularInline):
    model = DispensedBatch
    extra = 0
    can_delete = False
    readonly_fields = ("stock", "quantity")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(MedicationDispense)
class MedicationDispenseAdmin(admin.ModelAdmin):
    list_display = ("medication", "patient", "quantity", "dispensed_at", "hospital_id")
    list_filter = ("hospital_id",)
    # stock only moves through PharmacyService
    readonly_fields = ("medication", "quantity", "bill")
    inlines = [DispensedBatchInline]

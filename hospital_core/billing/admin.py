from django.contrib import admin

from hospital_core.billing.models import Bill, BillItem, Payment


class BillItemInline(admin.TabularInline):
    model = BillItem
    extra = 0
    readonly_fields = ("line_total",)


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    list_display = ("id", "patient", "amount", "amount_paid", "is_paid", "hospital_id", "created_at")
    list_filter = ("is_paid", "hospital_id")
    search_fields = ("patient__first_name", "patient__last_name", "description")
    inlines = [BillItemInline]


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("bill", "amount", "method", "reference", "received_at")
    list_filter = ("method",)
    ordering = ("-received_at",)

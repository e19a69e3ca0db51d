from django.contrib import admin

from hospital_core.iam.models import HospitalMembership


@admin.register(HospitalMembership)
class HospitalMembershipAdmin(admin.ModelAdmin):
    list_display = ("user", "hospital", "is_primary", "is_active", "created_at")
    list_filter = ("is_active", "hospital")
    search_fields = ("user__username", "user__email", "hospital__name", "hospital__code")

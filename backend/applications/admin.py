from django.contrib import admin

from .models import Application


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ("id", "listing", "applicant", "status", "days_renting", "created_at")
    list_filter = ("status",)
    search_fields = ("listing__title", "applicant__username", "applicant__email")
    raw_id_fields = ("listing", "applicant")
    readonly_fields = ("payment_link_id", "payment_link_url", "confirmed_at", "paid_at")

from django.contrib import admin

from .models import SecureToken


@admin.register(SecureToken)
class SecureTokenAdmin(admin.ModelAdmin):
    list_display = ("application", "listing", "applicant_uuid", "created_at")
    raw_id_fields = ("listing", "application")
    readonly_fields = ("token", "applicant_uuid", "listing", "application", "created_at")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

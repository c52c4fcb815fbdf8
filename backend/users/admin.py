from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "email", "name", "uuid", "is_staff", "is_active")
    readonly_fields = ("uuid",)
    search_fields = ("username", "email", "name", "uuid")
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Marketplace", {"fields": ("uuid", "name", "neighborhood")}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Marketplace", {"fields": ("name", "neighborhood")}),
    )

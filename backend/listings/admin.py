from django.contrib import admin

from .models import Listing


@admin.register(Listing)
class ListingAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "owner", "status", "active", "price_amount", "price_unit")
    list_filter = ("status", "active", "price_unit")
    search_fields = ("title", "owner__username", "owner__email")
    raw_id_fields = ("owner", "current_tenant")

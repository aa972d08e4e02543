"""
Blood stock admin configuration.
"""

from django.contrib import admin

from .models import BloodStockEntry


@admin.register(BloodStockEntry)
class BloodStockEntryAdmin(admin.ModelAdmin):
    list_display = ["blood_type", "quantity", "reserved_quantity", "status", "expiry_date", "last_updated"]
    list_filter = ["status"]
    search_fields = ["blood_type", "batch_number", "location"]
    readonly_fields = ["id", "last_updated", "updated_by", "created_at"]
    ordering = ["blood_type"]

"""
Hospital admin configuration.
"""

from django.contrib import admin

from .models import HospitalRecord


@admin.register(HospitalRecord)
class HospitalRecordAdmin(admin.ModelAdmin):
    list_display = ["name", "city", "contact_person", "phone", "is_active", "created_at"]
    list_filter = ["is_active", "city"]
    search_fields = ["name", "city", "email", "contact_person"]
    readonly_fields = ["id", "created_at", "updated_at"]
    ordering = ["name"]

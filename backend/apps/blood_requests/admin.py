"""
Blood request admin configuration.
"""

from django.contrib import admin

from .models import BloodRequest


@admin.register(BloodRequest)
class BloodRequestAdmin(admin.ModelAdmin):
    list_display = [
        "patient_name",
        "blood_type",
        "quantity",
        "urgency",
        "hospital_name",
        "status",
        "required_date",
        "created_at",
    ]
    list_filter = ["status", "urgency", "blood_type", "created_at"]
    search_fields = ["patient_name", "hospital_name", "contact_person"]
    readonly_fields = [
        "id",
        "requester_id",
        "fulfilled_quantity",
        "fulfilled_date",
        "fulfilled_by",
        "created_at",
        "updated_at",
    ]
    ordering = ["-created_at"]

    fieldsets = (
        (None, {
            "fields": ("id", "requester_id", "patient_name", "blood_type", "quantity", "urgency", "status")
        }),
        ("Hospital", {
            "fields": ("hospital_id", "hospital_name", "contact_person", "contact_phone"),
        }),
        ("Clinical Data", {
            "fields": ("medical_reason", "required_date", "notes"),
            "classes": ("collapse",),
        }),
        ("Fulfillment", {
            "fields": ("fulfilled_quantity", "fulfilled_date", "fulfilled_by"),
        }),
        ("Timestamps", {
            "fields": ("created_at", "updated_at"),
        }),
    )

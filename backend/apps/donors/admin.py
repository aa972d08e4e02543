"""
Donor admin configuration.
"""

from django.contrib import admin

from .models import Donation, DonorRegistration


@admin.register(DonorRegistration)
class DonorRegistrationAdmin(admin.ModelAdmin):
    list_display = [
        "full_name",
        "email",
        "blood_type",
        "status",
        "is_eligible",
        "created_at",
    ]
    list_filter = ["status", "blood_type", "is_eligible", "created_at"]
    search_fields = ["full_name", "email", "phone"]
    readonly_fields = ["id", "user_id", "approved_by", "approved_at", "created_at", "updated_at"]
    ordering = ["-created_at"]

    fieldsets = (
        (None, {
            "fields": ("id", "user_id", "full_name", "email", "phone", "status")
        }),
        ("Donor Data", {
            "fields": ("blood_type", "date_of_birth", "gender", "weight", "height", "address", "city"),
        }),
        ("Medical", {
            "fields": (
                "medical_conditions",
                "medications",
                "last_donation_date",
                "is_eligible",
                "eligibility_notes",
                "preferred_donation_time",
            ),
            "classes": ("collapse",),
        }),
        ("Emergency Contact", {
            "fields": ("emergency_contact", "emergency_phone"),
            "classes": ("collapse",),
        }),
        ("Decision", {
            "fields": ("approved_by", "approved_at"),
        }),
        ("Timestamps", {
            "fields": ("created_at", "updated_at"),
        }),
    )


@admin.register(Donation)
class DonationAdmin(admin.ModelAdmin):
    list_display = ["donation_date", "blood_type", "quantity", "status", "location", "donor_id"]
    list_filter = ["status", "blood_type", "donation_date"]
    search_fields = ["location", "donor_id"]
    readonly_fields = ["id", "created_at", "updated_at"]
    ordering = ["-donation_date"]

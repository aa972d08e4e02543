"""
Account admin configuration.

The Django admin is the privileged path for role changes, deactivation and
donation counters.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import Principal, Profile


@admin.register(Principal)
class PrincipalAdmin(UserAdmin):
    list_display = ["email", "is_active", "is_staff", "date_joined"]
    list_filter = ["is_active", "is_staff"]
    search_fields = ["email"]
    ordering = ["email"]
    readonly_fields = ["id", "date_joined", "last_login"]

    fieldsets = (
        (None, {"fields": ("id", "email", "password")}),
        ("Permissions", {
            "fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions"),
        }),
        ("Timestamps", {"fields": ("date_joined", "last_login")}),
    )
    add_fieldsets = (
        (None, {
            "classes": ("wide",),
            "fields": ("email", "password1", "password2"),
        }),
    )


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = [
        "full_name",
        "email",
        "role",
        "blood_type",
        "is_active",
        "total_donations",
        "created_at",
    ]
    list_filter = ["role", "is_active", "blood_type"]
    search_fields = ["full_name", "email", "phone"]
    readonly_fields = ["principal", "created_at", "updated_at"]
    ordering = ["full_name"]

    fieldsets = (
        (None, {
            "fields": ("principal", "full_name", "email", "phone", "role", "is_active")
        }),
        ("Donor Data", {
            "fields": ("blood_type", "date_of_birth", "gender", "last_donation_date", "total_donations"),
        }),
        ("Contact", {
            "fields": ("address", "city", "emergency_contact", "emergency_phone", "avatar_url"),
            "classes": ("collapse",),
        }),
        ("Timestamps", {
            "fields": ("created_at", "updated_at"),
        }),
    )

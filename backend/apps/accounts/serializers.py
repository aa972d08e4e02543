"""
Account serializers.
"""

from django.utils import timezone
from rest_framework import serializers

from apps.core.serializers import FormSerializer, raise_if_invalid
from apps.core.validators import BirthDateValidator, BloodTypeValidator

from .models import Profile


class ProfileFieldsSerializer(FormSerializer):
    """
    Self-service profile fields, used for sign-up extras and own-profile
    updates. Always run with ``partial=True``.
    """

    blood_type = serializers.CharField(required=False, allow_null=True)

    optional_fields = (
        "phone",
        "blood_type",
        "date_of_birth",
        "gender",
        "address",
        "city",
        "emergency_contact",
        "emergency_phone",
        "avatar_url",
    )

    class Meta:
        model = Profile
        fields = [
            "full_name",
            "phone",
            "blood_type",
            "date_of_birth",
            "gender",
            "address",
            "city",
            "emergency_contact",
            "emergency_phone",
            "avatar_url",
        ]

    def validate_full_name(self, value):
        return " ".join(value.split())

    def validate_blood_type(self, value):
        raise_if_invalid(BloodTypeValidator.validate(value))
        return value

    def validate_date_of_birth(self, value):
        raise_if_invalid(BirthDateValidator.validate(value, today=timezone.localdate()))
        return value

class ProfileSerializer(serializers.ModelSerializer):
    """Read shape of a Profile. Updates go through AuthContext.update_profile."""

    id = serializers.UUIDField(source="pk", read_only=True)

    class Meta:
        model = Profile
        fields = [
            "id",
            "full_name",
            "email",
            "phone",
            "role",
            "blood_type",
            "date_of_birth",
            "gender",
            "address",
            "city",
            "emergency_contact",
            "emergency_phone",
            "avatar_url",
            "is_active",
            "last_donation_date",
            "total_donations",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class SignInSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(trim_whitespace=False)


class SignUpSerializer(serializers.Serializer):
    """
    Sign-up form.

    Role and the optional profile fields are checked by the auth context so
    the same rules apply outside the API.
    """

    email = serializers.EmailField()
    password = serializers.CharField(trim_whitespace=False)
    full_name = serializers.CharField()
    role = serializers.CharField(required=False, default="public")
    phone = serializers.CharField(required=False, allow_blank=True)
    blood_type = serializers.CharField(required=False, allow_blank=True)
    date_of_birth = serializers.CharField(required=False, allow_blank=True)
    gender = serializers.CharField(required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    city = serializers.CharField(required=False, allow_blank=True)
    hospital_name = serializers.CharField(required=False, allow_blank=True)
    hospital_address = serializers.CharField(required=False, allow_blank=True)


def session_payload(ctx):
    """Response body for an opened or refreshed session."""
    profile = ctx.profile
    return {
        "access_token": ctx.access_token,
        "token_type": "bearer",
        "principal_id": str(ctx.principal_id),
        "profile": ProfileSerializer(profile).data if profile else None,
    }

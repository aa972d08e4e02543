"""
Donor registration and donation serializers.
"""

from django.utils import timezone
from rest_framework import serializers

from apps.core.serializers import FormSerializer, raise_if_invalid
from apps.core.validators import HEIGHT, WEIGHT, BirthDateValidator, BloodTypeValidator

from .models import Donation, DonorRegistration

PREFERRED_DONATION_TIMES = ["morning", "afternoon", "evening"]


class DonorRegistrationCreateSerializer(FormSerializer):
    """
    Registration form. Status and decision fields are not accepted here.
    """

    blood_type = serializers.CharField()
    preferred_donation_time = serializers.ChoiceField(
        choices=PREFERRED_DONATION_TIMES, required=False, allow_null=True
    )

    optional_fields = (
        "height",
        "city",
        "medical_conditions",
        "medications",
        "last_donation_date",
        "preferred_donation_time",
        "emergency_contact",
        "emergency_phone",
    )

    class Meta:
        model = DonorRegistration
        fields = [
            "full_name",
            "email",
            "phone",
            "blood_type",
            "date_of_birth",
            "gender",
            "weight",
            "height",
            "address",
            "city",
            "medical_conditions",
            "medications",
            "last_donation_date",
            "preferred_donation_time",
            "emergency_contact",
            "emergency_phone",
        ]

    def validate_full_name(self, value):
        return " ".join(value.split())

    def validate_email(self, value):
        return value.lower()

    def validate_blood_type(self, value):
        raise_if_invalid(BloodTypeValidator.validate(value))
        return value

    def validate_date_of_birth(self, value):
        raise_if_invalid(BirthDateValidator.validate(value, today=timezone.localdate()))
        return value

    def validate_weight(self, value):
        raise_if_invalid(WEIGHT.validate(value))
        return value

    def validate_height(self, value):
        if value is not None:
            raise_if_invalid(HEIGHT.validate(value))
        return value

    def validate_last_donation_date(self, value):
        if value is not None and value > timezone.localdate():
            raise serializers.ValidationError("Last donation date cannot be in the future")
        return value

class DonorRegistrationSerializer(serializers.ModelSerializer):

    class Meta:
        model = DonorRegistration
        fields = [
            "id",
            "user_id",
            "full_name",
            "email",
            "phone",
            "blood_type",
            "date_of_birth",
            "gender",
            "weight",
            "height",
            "address",
            "city",
            "medical_conditions",
            "medications",
            "last_donation_date",
            "is_eligible",
            "eligibility_notes",
            "preferred_donation_time",
            "emergency_contact",
            "emergency_phone",
            "status",
            "approved_by",
            "approved_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class DonorRegistrationListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for lists and the admin panel."""

    class Meta:
        model = DonorRegistration
        fields = [
            "id",
            "full_name",
            "email",
            "blood_type",
            "status",
            "created_at",
        ]
        read_only_fields = fields


class DecisionSerializer(serializers.Serializer):
    approve = serializers.BooleanField()


class DonationSerializer(serializers.ModelSerializer):
    """Donation row with the donor's name and phone resolved from profiles."""

    donor = serializers.SerializerMethodField()

    class Meta:
        model = Donation
        fields = [
            "id",
            "donor_id",
            "donor",
            "donation_date",
            "blood_type",
            "quantity",
            "status",
            "location",
            "notes",
            "created_at",
        ]
        read_only_fields = fields

    def get_donor(self, obj):
        profile = self.context.get("donors", {}).get(obj.donor_id)
        if profile is None:
            return None
        return {"full_name": profile.full_name, "phone": profile.phone}

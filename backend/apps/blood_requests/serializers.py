"""
Blood request serializers.
"""

from django.utils import timezone
from rest_framework import serializers

from apps.core.serializers import FormSerializer, raise_if_invalid
from apps.core.validators import BloodTypeValidator, QuantityValidator, RequiredDateValidator

from .models import BloodRequest


class BloodRequestCreateSerializer(FormSerializer):
    """
    New blood request form.

    Either ``hospital_id`` or a free-text ``hospital_name`` is needed; the
    hospital lookup itself happens in RequestWorkflow.submit.
    """

    blood_type = serializers.CharField()
    quantity = serializers.IntegerField()

    optional_fields = ("urgency", "hospital_id", "hospital_name", "medical_reason", "notes")

    class Meta:
        model = BloodRequest
        fields = [
            "patient_name",
            "blood_type",
            "quantity",
            "urgency",
            "hospital_id",
            "hospital_name",
            "contact_person",
            "contact_phone",
            "medical_reason",
            "required_date",
            "notes",
        ]

    def validate_patient_name(self, value):
        return " ".join(value.split())

    def validate_blood_type(self, value):
        raise_if_invalid(BloodTypeValidator.validate(value))
        return value

    def validate_quantity(self, value):
        raise_if_invalid(QuantityValidator.validate(value))
        return value

    def validate_required_date(self, value):
        raise_if_invalid(RequiredDateValidator.validate(value, today=timezone.localdate()))
        return value

    def validate(self, attrs):
        attrs["urgency"] = attrs.get("urgency") or "normal"
        if attrs.get("hospital_id") is None and not attrs.get("hospital_name"):
            raise serializers.ValidationError(
                {"hospital_name": ["Select a hospital or enter its name"]}
            )
        return attrs

class BloodRequestSerializer(serializers.ModelSerializer):
    """Full read shape."""

    class Meta:
        model = BloodRequest
        fields = [
            "id",
            "requester_id",
            "patient_name",
            "blood_type",
            "quantity",
            "urgency",
            "hospital_id",
            "hospital_name",
            "contact_person",
            "contact_phone",
            "medical_reason",
            "required_date",
            "status",
            "fulfilled_quantity",
            "fulfilled_date",
            "fulfilled_by",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BloodRequestListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for lists and the admin panel."""

    class Meta:
        model = BloodRequest
        fields = [
            "id",
            "patient_name",
            "blood_type",
            "quantity",
            "urgency",
            "hospital_name",
            "required_date",
            "status",
            "created_at",
        ]
        read_only_fields = fields


class DecisionSerializer(serializers.Serializer):
    approve = serializers.BooleanField()


class FulfillSerializer(serializers.Serializer):
    # Range and stock checks live in RequestWorkflow.fulfill
    fulfilled_quantity = serializers.IntegerField()
    notes = serializers.CharField(required=False, allow_blank=True)

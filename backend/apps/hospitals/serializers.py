"""
Hospital serializers.
"""

from rest_framework import serializers

from .models import HospitalRecord


class HospitalSerializer(serializers.ModelSerializer):

    class Meta:
        model = HospitalRecord
        fields = [
            "id",
            "name",
            "address",
            "city",
            "phone",
            "email",
            "contact_person",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_name(self, value):
        if not value or not value.strip():
            raise serializers.ValidationError("Hospital name is required")
        return " ".join(value.split())


class HospitalOptionSerializer(serializers.ModelSerializer):
    """Compact shape for the hospital picker of the request form."""

    class Meta:
        model = HospitalRecord
        fields = ["id", "name", "city"]
        read_only_fields = fields

"""
Blood stock serializers.
"""

from rest_framework import serializers

from .models import BloodStockEntry
from .services import suggest_status


class BloodStockSerializer(serializers.ModelSerializer):
    """
    Stock entry as shown to every signed-in user.

    ``suggested_status`` comes from the configured thresholds and is only a
    hint next to the admin-set ``status``.
    """

    available_quantity = serializers.IntegerField(read_only=True)
    suggested_status = serializers.SerializerMethodField()

    class Meta:
        model = BloodStockEntry
        fields = [
            "id",
            "blood_type",
            "quantity",
            "reserved_quantity",
            "available_quantity",
            "status",
            "suggested_status",
            "expiry_date",
            "location",
            "batch_number",
            "notes",
            "last_updated",
            "updated_by",
            "created_at",
        ]
        read_only_fields = fields

    def get_suggested_status(self, obj):
        return suggest_status(obj.quantity)

"""
Blood stock model.
"""

import uuid

from django.db import models

from apps.core.validators import BLOOD_TYPE_CHOICES


class BloodStockEntry(models.Model):
    """
    Units on hand for one blood type.

    ``status`` is set by admins and is not derived from ``quantity``.
    """

    STATUS_CHOICES = [
        ("abundant", "Abundant"),
        ("sufficient", "Sufficient"),
        ("limited", "Limited"),
        ("critical", "Critical"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    blood_type = models.CharField(max_length=3, choices=BLOOD_TYPE_CHOICES, unique=True)

    quantity = models.PositiveIntegerField(default=0)
    reserved_quantity = models.PositiveIntegerField(default=0)
    expiry_date = models.DateField(blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="sufficient")

    location = models.CharField(max_length=200, blank=True, null=True)
    batch_number = models.CharField(max_length=100, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)

    last_updated = models.DateTimeField(auto_now=True)
    updated_by = models.UUIDField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "blood_stock"
        ordering = ["blood_type"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(reserved_quantity__lte=models.F("quantity")),
                name="blood_stock_reserved_lte_quantity",
            ),
        ]

    def __str__(self):
        return f"{self.blood_type}: {self.quantity} ({self.status})"

    @property
    def available_quantity(self):
        return self.quantity - self.reserved_quantity

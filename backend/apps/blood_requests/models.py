"""
Blood request model.
"""

import uuid

from django.db import models

from apps.core.validators import BLOOD_TYPE_CHOICES


class BloodRequest(models.Model):
    """
    A request for units of one blood type.

        pending -> approved -> fulfilled
        pending -> cancelled
        approved -> cancelled

    ``requester_id``, ``hospital_id`` and ``fulfilled_by`` are ids looked up
    on demand. ``hospital_name`` is copied from the hospital at submission so
    the request stays readable if the hospital changes.
    """

    URGENCY_CHOICES = [
        ("low", "Low"),
        ("normal", "Normal"),
        ("high", "High"),
        ("emergency", "Emergency"),
    ]

    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("approved", "Approved"),
        ("fulfilled", "Fulfilled"),
        ("cancelled", "Cancelled"),
    ]

    # Requests still waiting on an admin or on stock
    ACTIVE_STATUSES = ("pending", "approved")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    requester_id = models.UUIDField(blank=True, null=True, db_index=True)

    patient_name = models.CharField(max_length=200)
    blood_type = models.CharField(max_length=3, choices=BLOOD_TYPE_CHOICES)
    quantity = models.PositiveIntegerField()
    urgency = models.CharField(max_length=20, choices=URGENCY_CHOICES, default="normal")

    hospital_id = models.UUIDField(blank=True, null=True)
    hospital_name = models.CharField(max_length=200, blank=True, null=True)
    contact_person = models.CharField(max_length=200)
    contact_phone = models.CharField(max_length=30)
    medical_reason = models.TextField(blank=True, null=True)
    required_date = models.DateField()

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")
    fulfilled_quantity = models.PositiveIntegerField(default=0)
    fulfilled_date = models.DateTimeField(blank=True, null=True)
    fulfilled_by = models.UUIDField(blank=True, null=True)
    notes = models.TextField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "blood_requests"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="blood_req_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(fulfilled_quantity__lte=models.F("quantity")),
                name="blood_req_fulfilled_lte_quantity",
            ),
        ]

    def __str__(self):
        return f"{self.patient_name}: {self.quantity} x {self.blood_type} ({self.status})"

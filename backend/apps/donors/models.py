"""
Donor registration and donation models.
"""

import uuid

from django.db import models

from apps.core.validators import BLOOD_TYPE_CHOICES, GENDER_CHOICES


class DonorRegistration(models.Model):
    """
    One donor eligibility application.

    Rows are never deleted; status moves pending -> approved | rejected once.
    ``user_id`` and ``approved_by`` are principal ids looked up on demand,
    not foreign keys (walk-in registrations have no user).
    """

    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("approved", "Approved"),
        ("rejected", "Rejected"),
        ("inactive", "Inactive"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.UUIDField(blank=True, null=True, db_index=True)

    full_name = models.CharField(max_length=200)
    email = models.EmailField()
    phone = models.CharField(max_length=30)
    blood_type = models.CharField(max_length=3, choices=BLOOD_TYPE_CHOICES)
    date_of_birth = models.DateField()
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES)
    weight = models.DecimalField(max_digits=5, decimal_places=1)
    height = models.DecimalField(max_digits=5, decimal_places=1, blank=True, null=True)
    address = models.TextField()
    city = models.CharField(max_length=100, blank=True, null=True)

    # Medical
    medical_conditions = models.TextField(blank=True, null=True)
    medications = models.TextField(blank=True, null=True)
    last_donation_date = models.DateField(blank=True, null=True)
    is_eligible = models.BooleanField(default=True)
    eligibility_notes = models.TextField(blank=True, null=True)
    preferred_donation_time = models.CharField(max_length=50, blank=True, null=True)

    emergency_contact = models.CharField(max_length=200, blank=True, null=True)
    emergency_phone = models.CharField(max_length=30, blank=True, null=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")
    approved_by = models.UUIDField(blank=True, null=True)
    approved_at = models.DateTimeField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "donor_registrations"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="donor_reg_status_idx"),
        ]

    def __str__(self):
        return f"{self.full_name} ({self.blood_type}) - {self.status}"

    @property
    def is_decided(self):
        """True once the registration has left the pending state."""
        return self.status != "pending"


class Donation(models.Model):
    """A scheduled or completed donation. ``donor_id`` is a Profile id."""

    STATUS_CHOICES = [
        ("scheduled", "Scheduled"),
        ("completed", "Completed"),
        ("cancelled", "Cancelled"),
        ("postponed", "Postponed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    donor_id = models.UUIDField(blank=True, null=True, db_index=True)

    donation_date = models.DateField()
    blood_type = models.CharField(max_length=3, choices=BLOOD_TYPE_CHOICES)
    quantity = models.PositiveIntegerField(default=1)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="scheduled")
    location = models.CharField(max_length=200, blank=True, default="")
    notes = models.TextField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "donations"
        ordering = ["-donation_date"]

    def __str__(self):
        return f"{self.blood_type} x{self.quantity} on {self.donation_date} ({self.status})"

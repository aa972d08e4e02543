"""
Hospital model.
"""

import uuid

from django.db import models


class HospitalRecord(models.Model):
    """
    A hospital that can receive blood.

    Created by admins or automatically by a hospital sign-up. Profiles are
    not linked to it; the sign-up copies name, email and contact person.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=200, db_index=True)
    address = models.TextField(blank=True, default="")
    city = models.CharField(max_length=100, blank=True, null=True)
    phone = models.CharField(max_length=30, blank=True, null=True)
    email = models.EmailField(blank=True, null=True)
    contact_person = models.CharField(max_length=200, blank=True, null=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "hospitals"
        ordering = ["name"]

    def __str__(self):
        return self.name

"""
Principal and Profile models.

A Principal is the authenticated identity (email + password hash). A Profile
is the domain record attached 1:1 to it; the Profile primary key is the
Principal id.
"""

import uuid

from django.contrib.auth.base_user import AbstractBaseUser, BaseUserManager
from django.contrib.auth.models import PermissionsMixin
from django.db import models
from django.utils import timezone

from apps.core.gate import Role
from apps.core.validators import BLOOD_TYPE_CHOICES, GENDER_CHOICES


class PrincipalManager(BaseUserManager):
    use_in_migrations = True

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("Email is required")
        email = self.normalize_email(email).lower()
        principal = self.model(email=email, **extra_fields)
        principal.set_password(password)
        principal.save(using=self._db)
        return principal

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        return self.create_user(email, password, **extra_fields)


class Principal(AbstractBaseUser, PermissionsMixin):
    """Authenticated identity issued by the auth provider."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(
        default=False,
        help_text="Can log into the Django admin site",
    )
    date_joined = models.DateTimeField(default=timezone.now)

    objects = PrincipalManager()

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        db_table = "principals"

    def __str__(self):
        return self.email


class Profile(models.Model):
    """
    Domain profile of a principal: role, contact and donor attributes.

    Role changes only through the Django admin site.
    """

    ROLE_CHOICES = [(r.value, r.value.capitalize()) for r in Role]

    principal = models.OneToOneField(
        Principal,
        primary_key=True,
        on_delete=models.CASCADE,
        related_name="profile",
        db_column="id",
    )

    full_name = models.CharField(max_length=200)
    email = models.EmailField()
    phone = models.CharField(max_length=30, blank=True, null=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=Role.PUBLIC.value)

    blood_type = models.CharField(
        max_length=3, choices=BLOOD_TYPE_CHOICES, blank=True, null=True
    )
    date_of_birth = models.DateField(blank=True, null=True)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES, blank=True, null=True)
    address = models.TextField(blank=True, null=True)
    city = models.CharField(max_length=100, blank=True, null=True)
    emergency_contact = models.CharField(max_length=200, blank=True, null=True)
    emergency_phone = models.CharField(max_length=30, blank=True, null=True)
    avatar_url = models.URLField(blank=True, null=True)

    is_active = models.BooleanField(default=True)
    last_donation_date = models.DateField(blank=True, null=True)
    total_donations = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "profiles"
        ordering = ["full_name"]
        indexes = [
            models.Index(fields=["role", "is_active"], name="profiles_role_active_idx"),
        ]

    def __str__(self):
        return f"{self.full_name} ({self.role})"

"""
Sign-up and self-service profile helpers.
"""

import structlog
from django.db import DatabaseError, transaction
from prometheus_client import Counter

from apps.core.exceptions import NotAuthorized
from apps.core.gate import Role
from apps.core.validators import FieldErrors
from apps.hospitals.models import HospitalRecord

from .models import Profile
from .serializers import ProfileFieldsSerializer

logger = structlog.get_logger(__name__)

SIGN_UP_TOTAL = Counter(
    "sign_up_total",
    "Completed sign-ups",
    ["role"],
)
HOSPITAL_AUTO_CREATE_TOTAL = Counter(
    "hospital_auto_create_total",
    "Hospital records created from a hospital sign-up",
    ["status"],  # success, error
)

# Roles a visitor may pick on the sign-up form
SELF_SERVICE_ROLES = [Role.PUBLIC.value, Role.DONOR.value, Role.HOSPITAL.value]

SELF_SERVICE_FIELDS = frozenset(ProfileFieldsSerializer.Meta.fields)

# Profile fields a sign-up form may carry besides the account itself
SIGN_UP_PROFILE_FIELDS = ("phone", "blood_type", "date_of_birth", "gender", "address", "city")

# Changed only through the Django admin site
ADMIN_ONLY_FIELDS = frozenset({
    "role",
    "is_active",
    "total_donations",
    "last_donation_date",
})


def _clean_profile_fields(data: dict, errors: FieldErrors) -> dict:
    serializer = ProfileFieldsSerializer(data=data, partial=True)
    if serializer.is_valid():
        return dict(serializer.validated_data)
    for field, messages in serializer.errors.items():
        for message in messages:
            errors.add(field, str(message))
    return {}


def validate_sign_up(email, password, full_name, role):
    """Field checks run before anything is written."""
    errors = FieldErrors()
    errors.require({"email": email}, "email", "Email")
    errors.require({"password": password}, "password", "Password")
    if errors.require({"full_name": full_name}, "full_name", "Full name"):
        _clean_profile_fields({"full_name": full_name}, errors)
    if role not in SELF_SERVICE_ROLES:
        errors.add("role", f"Role must be one of {', '.join(SELF_SERVICE_ROLES)}")
    return errors


def clean_profile_extra(extra: dict, errors: FieldErrors) -> dict:
    """Keep the optional profile fields of a sign-up form and validate them."""
    present = {}
    for field in SIGN_UP_PROFILE_FIELDS:
        value = extra.get(field)
        if value not in (None, ""):
            present[field] = value
    return _clean_profile_fields(present, errors)


def create_profile(principal, full_name, role, **fields) -> Profile:
    profile = Profile.objects.create(
        principal=principal,
        email=principal.email,
        full_name=" ".join(full_name.split()),
        role=role,
        **fields,
    )
    SIGN_UP_TOTAL.labels(role=role).inc()
    logger.info("profile_created", profile_id=str(profile.pk), role=role)
    return profile


def register_hospital(profile, hospital_name, hospital_address=None):
    """
    Create the HospitalRecord for a hospital sign-up.

    A failure is logged and returns None; the account and profile are kept.
    """
    try:
        with transaction.atomic():
            hospital = HospitalRecord.objects.create(
                name=hospital_name.strip(),
                address=(hospital_address or "").strip(),
                email=profile.email,
                phone=profile.phone,
                contact_person=profile.full_name,
            )
    except DatabaseError as e:
        HOSPITAL_AUTO_CREATE_TOTAL.labels(status="error").inc()
        logger.error(
            "hospital_auto_create_failed",
            profile_id=str(profile.pk),
            error_type=type(e).__name__,
        )
        return None

    HOSPITAL_AUTO_CREATE_TOTAL.labels(status="success").inc()
    logger.info(
        "hospital_auto_created",
        profile_id=str(profile.pk),
        hospital_id=str(hospital.pk),
    )
    return hospital


def clean_profile_updates(updates: dict) -> dict:
    """
    Check a self-service profile update.

    Raises NotAuthorized for admin-only fields and ValidationFailed for
    unknown or malformed ones.
    """
    forbidden = sorted(set(updates) & ADMIN_ONLY_FIELDS)
    if forbidden:
        raise NotAuthorized(
            message="These profile fields can only be changed by an administrator",
            detail=forbidden,
        )

    errors = FieldErrors()
    for field in sorted(set(updates) - SELF_SERVICE_FIELDS):
        errors.add(field, "This field cannot be updated")

    allowed = {field: updates[field] for field in SELF_SERVICE_FIELDS & set(updates)}
    cleaned = _clean_profile_fields(allowed, errors)
    errors.raise_if_any()
    return cleaned

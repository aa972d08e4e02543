"""
Validators for blood bank domain values.
- Blood type: one of the 8 canonical ABO/Rh types
- Weight / height ranges for donor eligibility forms
- Request quantity and required date
"""

import uuid
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Tuple

from .exceptions import ValidationFailed

BLOOD_TYPES = ["A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-"]
BLOOD_TYPE_CHOICES = [(bt, bt) for bt in BLOOD_TYPES]

GENDER_CHOICES = [
    ("male", "Male"),
    ("female", "Female"),
]
GENDERS = [value for value, _ in GENDER_CHOICES]


class BloodTypeValidator:
    """Blood type must be one of the canonical values, case sensitive."""

    @classmethod
    def validate(cls, value) -> Tuple[bool, Optional[str]]:
        if not value:
            return False, "Blood type is required"
        if value not in BLOOD_TYPES:
            return False, f"Blood type must be one of {', '.join(BLOOD_TYPES)}"
        return True, None


class RangeValidator:
    """
    Inclusive numeric range check.

    Accepts int, float, Decimal or numeric strings as submitted by forms.
    """

    def __init__(self, label: str, minimum, maximum, unit: str = ""):
        self.label = label
        self.minimum = Decimal(str(minimum))
        self.maximum = Decimal(str(maximum))
        self.unit = unit

    def validate(self, value) -> Tuple[bool, Optional[str]]:
        if value is None or value == "":
            return False, f"{self.label} is required"
        if isinstance(value, bool):
            return False, f"{self.label} must be a number"
        try:
            number = Decimal(str(value))
        except (InvalidOperation, ValueError):
            return False, f"{self.label} must be a number"
        if not number.is_finite():
            return False, f"{self.label} must be a number"

        if number < self.minimum or number > self.maximum:
            unit = f" {self.unit}" if self.unit else ""
            return False, (
                f"{self.label} must be between {self.minimum} and {self.maximum}{unit}"
            )
        return True, None


WEIGHT = RangeValidator("Weight", 45, 200, "kg")
HEIGHT = RangeValidator("Height", 140, 220, "cm")


class QuantityValidator:
    """Requested units of blood: a whole number from 1 to 10."""

    MIN_UNITS = 1
    MAX_UNITS = 10

    @classmethod
    def validate(cls, value) -> Tuple[bool, Optional[str]]:
        if value is None or value == "":
            return False, "Quantity is required"
        if isinstance(value, bool):
            return False, "Quantity must be a whole number"
        try:
            number = Decimal(str(value))
        except (InvalidOperation, ValueError):
            return False, "Quantity must be a whole number"
        if not number.is_finite() or number != number.to_integral_value():
            return False, "Quantity must be a whole number"

        if number < cls.MIN_UNITS or number > cls.MAX_UNITS:
            return False, f"Quantity must be between {cls.MIN_UNITS} and {cls.MAX_UNITS} units"
        return True, None


def parse_date(value) -> Optional[date]:
    """Accept a date or an ISO ``YYYY-MM-DD`` string; anything else is None."""
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


class RequiredDateValidator:
    """The date blood is needed by cannot be in the past."""

    @classmethod
    def validate(cls, value, today: Optional[date] = None) -> Tuple[bool, Optional[str]]:
        if not value:
            return False, "Required date is required"
        parsed = parse_date(value)
        if parsed is None:
            return False, "Required date must be a valid date (YYYY-MM-DD)"
        if parsed < (today or date.today()):
            return False, "Required date cannot be in the past"
        return True, None


class BirthDateValidator:
    @classmethod
    def validate(cls, value, today: Optional[date] = None) -> Tuple[bool, Optional[str]]:
        if not value:
            return False, "Date of birth is required"
        parsed = parse_date(value)
        if parsed is None:
            return False, "Date of birth must be a valid date (YYYY-MM-DD)"
        if parsed > (today or date.today()):
            return False, "Date of birth cannot be in the future"
        return True, None


class FieldErrors:
    """
    Collects per-field validation messages.

    Usage:
        errors = FieldErrors()
        errors.require(data, "full_name", "Full name")
        errors.check("weight", WEIGHT.validate(data.get("weight")))
        errors.raise_if_any()
    """

    def __init__(self):
        self.fields = {}

    def add(self, field: str, message: str):
        self.fields.setdefault(field, []).append(message)

    def check(self, field: str, result: Tuple[bool, Optional[str]]):
        is_valid, error = result
        if not is_valid:
            self.add(field, error)
        return is_valid

    def require(self, data: dict, field: str, label: str) -> bool:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            self.add(field, f"{label} is required")
            return False
        return True

    def raise_if_any(self):
        if self.fields:
            raise ValidationFailed(fields=self.fields)


def parse_uuid(value) -> Optional[uuid.UUID]:
    """Record ids arrive as strings from URLs and forms; None when malformed."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None

"""
Stock ledger: per blood type quantities and reservations.
"""

from typing import List, Optional

import structlog
from django.conf import settings
from django.db import IntegrityError, transaction
from prometheus_client import Counter

from apps.core.exceptions import InvalidQuantity, NotFound, ValidationFailed, store_operation
from apps.core.gate import Action, Resource
from apps.core.validators import BLOOD_TYPES, BloodTypeValidator, FieldErrors, parse_date

from .models import BloodStockEntry

logger = structlog.get_logger(__name__)

STOCK_UPDATES_TOTAL = Counter(
    "blood_stock_updates_total",
    "Blood stock changes",
    ["operation"],  # set_quantity, create_entry, update_details, fulfillment
)

STATUSES = [value for value, _ in BloodStockEntry.STATUS_CHOICES]
DETAIL_FIELDS = frozenset({
    "status",
    "location",
    "batch_number",
    "notes",
    "expiry_date",
    "reserved_quantity",
})


def parse_count(value, label="Quantity") -> int:
    """A whole, non-negative number of units. Raises InvalidQuantity."""
    if isinstance(value, bool):
        raise InvalidQuantity(detail=[f"{label} must be a whole number"])
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidQuantity(detail=[f"{label} must be a whole number"])
    if number < 0:
        raise InvalidQuantity(detail=[f"{label} cannot be negative"])
    return number


def suggest_status(quantity) -> Optional[str]:
    """
    Classify ``quantity`` with the ``STOCK_STATUS_THRESHOLDS`` setting.

    The setting is a list of ``[status, minimum]`` pairs; the first pair whose
    minimum is reached wins. Returns None when no thresholds are configured.
    Nothing is written: entry status stays admin-set.
    """
    thresholds = getattr(settings, "STOCK_STATUS_THRESHOLDS", None) or []
    ordered = sorted(thresholds, key=lambda pair: pair[1], reverse=True)
    for status, minimum in ordered:
        if quantity >= minimum:
            return status
    return None


def blood_type_sort_key(entry):
    return entry.blood_type


class StockLedger:
    """Stock operations for one session. Every mutation is admin only."""

    def __init__(self, ctx):
        self.ctx = ctx

    @store_operation("list_stock")
    def list_all(self) -> List[BloodStockEntry]:
        """Every entry, ordered A+, A-, AB+, AB-, B+, B-, O+, O-."""
        self.ctx.require(Resource.BLOOD_STOCK, Action.READ)
        return sorted(BloodStockEntry.objects.all(), key=blood_type_sort_key)

    @store_operation("get_stock")
    def get(self, blood_type) -> BloodStockEntry:
        self.ctx.require(Resource.BLOOD_STOCK, Action.READ)
        return self._get(blood_type)

    @store_operation("set_stock_quantity")
    def set_quantity(self, blood_type, new_quantity) -> BloodStockEntry:
        self.ctx.require(Resource.BLOOD_STOCK, Action.UPDATE)
        quantity = parse_count(new_quantity)

        with transaction.atomic():
            entry = self._get(blood_type, for_update=True)
            if quantity < entry.reserved_quantity:
                raise InvalidQuantity(
                    detail=[f"Quantity cannot be below the {entry.reserved_quantity} reserved units"]
                )
            previous = entry.quantity
            entry.quantity = quantity
            entry.updated_by = self.ctx.principal_id
            entry.save(update_fields=["quantity", "updated_by", "last_updated"])

        STOCK_UPDATES_TOTAL.labels(operation="set_quantity").inc()
        logger.info(
            "stock_quantity_set",
            blood_type=entry.blood_type,
            previous_quantity=previous,
            quantity=quantity,
        )
        return entry

    @store_operation("create_stock_entry")
    def create_entry(self, data: dict) -> BloodStockEntry:
        self.ctx.require(Resource.BLOOD_STOCK, Action.CREATE)

        errors = FieldErrors()
        if errors.check("blood_type", BloodTypeValidator.validate(data.get("blood_type"))):
            if BloodStockEntry.objects.filter(blood_type=data["blood_type"]).exists():
                errors.add("blood_type", "A stock entry for this blood type already exists")
        details = self._clean_details(data, errors)
        errors.raise_if_any()

        quantity = parse_count(data.get("quantity", 0))
        reserved = details.pop("reserved_quantity", 0)
        if reserved > quantity:
            raise InvalidQuantity(detail=["Reserved quantity cannot exceed quantity"])

        try:
            with transaction.atomic():
                entry = BloodStockEntry.objects.create(
                    blood_type=data["blood_type"],
                    quantity=quantity,
                    reserved_quantity=reserved,
                    updated_by=self.ctx.principal_id,
                    **details,
                )
        except IntegrityError:
            raise ValidationFailed(
                fields={"blood_type": ["A stock entry for this blood type already exists"]}
            )

        STOCK_UPDATES_TOTAL.labels(operation="create_entry").inc()
        logger.info("stock_entry_created", blood_type=entry.blood_type, quantity=quantity)
        return entry

    @store_operation("update_stock_details")
    def update_details(self, blood_type, data: dict) -> BloodStockEntry:
        """Change status, location, batch, notes, expiry or reservation. Not quantity."""
        self.ctx.require(Resource.BLOOD_STOCK, Action.UPDATE)

        errors = FieldErrors()
        for field in sorted(set(data) - DETAIL_FIELDS):
            errors.add(field, "This field cannot be changed here")
        details = self._clean_details(data, errors)
        errors.raise_if_any()

        with transaction.atomic():
            entry = self._get(blood_type, for_update=True)
            reserved = details.get("reserved_quantity")
            if reserved is not None and reserved > entry.quantity:
                raise InvalidQuantity(detail=["Reserved quantity cannot exceed quantity"])

            for field, value in details.items():
                setattr(entry, field, value)
            entry.updated_by = self.ctx.principal_id
            entry.save(update_fields=[*details, "updated_by", "last_updated"])

        STOCK_UPDATES_TOTAL.labels(operation="update_details").inc()
        logger.info("stock_details_updated", blood_type=entry.blood_type, fields=sorted(details))
        return entry

    def suggest_status(self, quantity) -> Optional[str]:
        return suggest_status(parse_count(quantity))

    def _clean_details(self, data, errors) -> dict:
        details = {}
        if "status" in data:
            if data["status"] not in STATUSES:
                errors.add("status", f"Status must be one of {', '.join(STATUSES)}")
            else:
                details["status"] = data["status"]
        for field in ("location", "batch_number", "notes"):
            if field in data:
                value = data[field]
                details[field] = value.strip() if isinstance(value, str) and value.strip() else None
                max_length = BloodStockEntry._meta.get_field(field).max_length
                if max_length and details[field] and len(details[field]) > max_length:
                    errors.add(field, f"Ensure this field has no more than {max_length} characters.")
        if "expiry_date" in data:
            if data["expiry_date"] in (None, ""):
                details["expiry_date"] = None
            else:
                parsed = parse_date(data["expiry_date"])
                if parsed is None:
                    errors.add("expiry_date", "Expiry date must be a valid date (YYYY-MM-DD)")
                details["expiry_date"] = parsed
        if "reserved_quantity" in data:
            details["reserved_quantity"] = parse_count(data["reserved_quantity"], "Reserved quantity")
        return details

    def _get(self, blood_type, for_update=False) -> BloodStockEntry:
        if blood_type not in BLOOD_TYPES:
            raise NotFound(message=f"Unknown blood type {blood_type}")
        queryset = BloodStockEntry.objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(blood_type=blood_type)
        except BloodStockEntry.DoesNotExist:
            raise NotFound(message=f"No stock entry for blood type {blood_type}")

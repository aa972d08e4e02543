"""
Blood request workflow.

    pending --approve--> approved --fulfill--> fulfilled
    pending --reject---> cancelled
    approved --cancel--> cancelled

fulfilled and cancelled are terminal. Fulfillment takes the units out of the
blood type's stock entry in the same transaction.
"""

import structlog
from django.db import transaction
from django.utils import timezone
from prometheus_client import Counter

from apps.core.exceptions import (
    InvalidQuantity,
    InvalidTransition,
    NotFound,
    ValidationFailed,
    store_operation,
)
from apps.core.gate import SCOPE_ALL, SCOPE_OWN, Action, Resource, history_scope
from apps.core.notifications import queue_notification
from apps.core.validators import parse_uuid
from apps.hospitals.models import HospitalRecord
from apps.stock.models import BloodStockEntry

from .models import BloodRequest
from .serializers import BloodRequestCreateSerializer
from .tasks import send_request_status_email

logger = structlog.get_logger(__name__)

BLOOD_REQUEST_SUBMITTED_TOTAL = Counter(
    "blood_request_submitted_total",
    "Blood requests submitted",
    ["urgency"],
)
BLOOD_REQUEST_TRANSITIONS_TOTAL = Counter(
    "blood_request_transitions_total",
    "Blood request status changes",
    ["to_status"],  # approved, cancelled, fulfilled, rejected_transition
)
UNITS_FULFILLED_TOTAL = Counter(
    "blood_units_fulfilled_total",
    "Units of blood handed out through fulfilled requests",
    ["blood_type"],
)


def validate_request(data) -> dict:
    """
    Check a blood request form. Raises ValidationFailed.

    Only local checks; the hospital lookup happens afterwards.
    """
    return BloodRequestCreateSerializer.clean(data)


class RequestWorkflow:
    """Blood request operations for one session."""

    def __init__(self, ctx):
        self.ctx = ctx

    @store_operation("submit_blood_request")
    def submit(self, data: dict) -> BloodRequest:
        self.ctx.require(Resource.BLOOD_REQUEST, Action.CREATE)
        cleaned = validate_request(data)

        if cleaned["hospital_id"] is not None:
            hospital = HospitalRecord.objects.filter(
                pk=cleaned["hospital_id"], is_active=True
            ).first()
            if hospital is None:
                raise ValidationFailed(fields={"hospital_id": ["Select an active hospital"]})
            cleaned["hospital_name"] = hospital.name

        blood_request = BloodRequest.objects.create(
            requester_id=self.ctx.principal_id,
            status="pending",
            fulfilled_quantity=0,
            fulfilled_date=None,
            fulfilled_by=None,
            **cleaned,
        )

        BLOOD_REQUEST_SUBMITTED_TOTAL.labels(urgency=blood_request.urgency).inc()
        logger.info(
            "blood_request_submitted",
            request_id=str(blood_request.id),
            blood_type=blood_request.blood_type,
            quantity=blood_request.quantity,
            urgency=blood_request.urgency,
        )
        return blood_request

    @store_operation("decide_blood_request")
    def decide(self, request_id, approve: bool) -> BloodRequest:
        """Approve (-> approved) or reject (-> cancelled) a pending request."""
        self.ctx.require(Resource.BLOOD_REQUEST, Action.APPROVE)
        new_status = "approved" if approve else "cancelled"
        return self._transition(request_id, "pending", new_status)

    @store_operation("cancel_blood_request")
    def cancel(self, request_id) -> BloodRequest:
        """Cancel an approved request. Pending ones are rejected through decide."""
        self.ctx.require(Resource.BLOOD_REQUEST, Action.CANCEL)
        return self._transition(request_id, "approved", "cancelled")

    @store_operation("fulfill_blood_request")
    def fulfill(self, request_id, fulfilled_quantity, notes=None) -> BloodRequest:
        """
        Hand out ``fulfilled_quantity`` units for an approved request.

        0 < fulfilled_quantity <= quantity, and the stock entry of the blood
        type must have that many unreserved units. Stock and request change
        together or not at all.
        """
        self.ctx.require(Resource.BLOOD_REQUEST, Action.FULFILL)
        pk = self._parse_id(request_id)

        with transaction.atomic():
            try:
                blood_request = BloodRequest.objects.select_for_update().get(pk=pk)
            except BloodRequest.DoesNotExist:
                raise NotFound(message="Blood request not found")

            if blood_request.status != "approved":
                BLOOD_REQUEST_TRANSITIONS_TOTAL.labels(to_status="rejected_transition").inc()
                raise InvalidTransition(
                    detail=[f"Only approved requests can be fulfilled (current: {blood_request.status})"]
                )

            units = self._parse_units(fulfilled_quantity, blood_request.quantity)

            try:
                stock = BloodStockEntry.objects.select_for_update().get(
                    blood_type=blood_request.blood_type
                )
            except BloodStockEntry.DoesNotExist:
                raise NotFound(message=f"No stock entry for blood type {blood_request.blood_type}")

            if stock.available_quantity < units:
                raise InvalidQuantity(
                    message="Not enough blood in stock",
                    detail=[f"{stock.available_quantity} unreserved units of {stock.blood_type} available"],
                )

            stock.quantity -= units
            stock.updated_by = self.ctx.principal_id
            stock.save(update_fields=["quantity", "updated_by", "last_updated"])

            blood_request.status = "fulfilled"
            blood_request.fulfilled_quantity = units
            blood_request.fulfilled_date = timezone.now()
            blood_request.fulfilled_by = self.ctx.principal_id
            update_fields = ["status", "fulfilled_quantity", "fulfilled_date", "fulfilled_by", "updated_at"]
            if notes:
                blood_request.notes = "\n".join(filter(None, [blood_request.notes, notes.strip()]))
                update_fields.append("notes")
            blood_request.save(update_fields=update_fields)

        BLOOD_REQUEST_TRANSITIONS_TOTAL.labels(to_status="fulfilled").inc()
        UNITS_FULFILLED_TOTAL.labels(blood_type=blood_request.blood_type).inc(units)
        logger.info(
            "blood_request_fulfilled",
            request_id=str(blood_request.id),
            blood_type=blood_request.blood_type,
            units=units,
            stock_remaining=stock.quantity,
        )
        queue_notification(send_request_status_email, "blood_request_status", blood_request.id)
        return blood_request

    @store_operation("list_active_blood_requests")
    def list_active(self, limit: int = 10):
        self.ctx.require(Resource.ADMIN_PANEL, Action.READ)
        return list(
            BloodRequest.objects.filter(status__in=BloodRequest.ACTIVE_STATUSES).order_by("-created_at")[:limit]
        )

    def list_visible(self, status=None):
        """Requests the caller may see: all for admins, own otherwise."""
        scope = history_scope(self.ctx.profile, Resource.BLOOD_REQUEST)
        queryset = BloodRequest.objects.all()
        if scope == SCOPE_OWN:
            queryset = queryset.filter(requester_id=self.ctx.profile.pk)
        elif scope != SCOPE_ALL:
            queryset = queryset.none()
        if status and status != "all":
            queryset = queryset.filter(status=status)
        return queryset.order_by("-created_at")

    @store_operation("get_blood_request")
    def get(self, request_id) -> BloodRequest:
        pk = self._parse_id(request_id)
        try:
            return self.list_visible().get(pk=pk)
        except BloodRequest.DoesNotExist:
            raise NotFound(message="Blood request not found")

    def _transition(self, request_id, from_status, to_status) -> BloodRequest:
        pk = self._parse_id(request_id)
        try:
            blood_request = BloodRequest.objects.get(pk=pk)
        except BloodRequest.DoesNotExist:
            raise NotFound(message="Blood request not found")

        if blood_request.status != from_status:
            BLOOD_REQUEST_TRANSITIONS_TOTAL.labels(to_status="rejected_transition").inc()
            raise InvalidTransition(
                detail=[f"Cannot move from {blood_request.status} to {to_status}"]
            )

        updated = BloodRequest.objects.filter(pk=pk, status=from_status).update(
            status=to_status, updated_at=timezone.now()
        )
        if updated == 0:
            BLOOD_REQUEST_TRANSITIONS_TOTAL.labels(to_status="rejected_transition").inc()
            raise InvalidTransition(detail=["The request changed while it was being updated"])

        blood_request.refresh_from_db()
        BLOOD_REQUEST_TRANSITIONS_TOTAL.labels(to_status=to_status).inc()
        logger.info(
            "blood_request_status_changed",
            request_id=str(blood_request.id),
            from_status=from_status,
            to_status=to_status,
        )
        queue_notification(send_request_status_email, "blood_request_status", blood_request.id)
        return blood_request

    def _parse_id(self, request_id):
        pk = parse_uuid(request_id)
        if pk is None:
            raise NotFound(message="Blood request not found")
        return pk

    def _parse_units(self, value, requested):
        if isinstance(value, bool):
            raise InvalidQuantity(detail=["Fulfilled quantity must be a whole number"])
        try:
            units = int(str(value).strip())
        except (TypeError, ValueError):
            raise InvalidQuantity(detail=["Fulfilled quantity must be a whole number"])
        if units <= 0 or units > requested:
            raise InvalidQuantity(
                detail=[f"Fulfilled quantity must be between 1 and {requested}"]
            )
        return units

"""
Donor registration workflow.

    pending --approve--> approved
    pending --reject---> rejected

approved and rejected are terminal. "inactive" is only set from the Django
admin site.
"""

import structlog
from django.db.models import Q
from django.utils import timezone
from prometheus_client import Counter

from apps.accounts.models import Profile
from apps.core.exceptions import AlreadyDecided, NotAuthorized, NotFound, store_operation
from apps.core.gate import SCOPE_ALL, SCOPE_OWN, Action, Resource, history_scope
from apps.core.notifications import queue_notification
from apps.core.validators import parse_uuid

from .models import Donation, DonorRegistration
from .serializers import DonorRegistrationCreateSerializer
from .tasks import send_registration_decision_email

logger = structlog.get_logger(__name__)

REGISTRATION_SUBMITTED_TOTAL = Counter(
    "donor_registration_submitted_total",
    "Donor registrations submitted",
    ["blood_type"],
)
REGISTRATION_DECIDED_TOTAL = Counter(
    "donor_registration_decided_total",
    "Donor registration decisions",
    ["decision"],  # approved, rejected, already_decided
)


def validate_registration(data) -> dict:
    """
    Check a registration form and return the values to store.

    Every field is checked so the caller gets all messages at once.
    Raises ValidationFailed.
    """
    return DonorRegistrationCreateSerializer.clean(data)


class RegistrationWorkflow:
    """
    Donor registration operations for one session.

    Every mutation checks the gate against ``ctx`` first.
    """

    def __init__(self, ctx):
        self.ctx = ctx

    @store_operation("submit_registration")
    def submit(self, data: dict) -> DonorRegistration:
        self.ctx.require(Resource.DONOR_REGISTRATION, Action.CREATE)
        cleaned = validate_registration(data)

        # status and decision fields never come from the form
        registration = DonorRegistration.objects.create(
            user_id=self.ctx.principal_id,
            status="pending",
            approved_by=None,
            approved_at=None,
            **cleaned,
        )

        REGISTRATION_SUBMITTED_TOTAL.labels(blood_type=registration.blood_type).inc()
        logger.info(
            "donor_registration_submitted",
            registration_id=str(registration.id),
            blood_type=registration.blood_type,
            walk_in=registration.user_id is None,
        )
        return registration

    @store_operation("decide_registration")
    def decide(self, registration_id, approve: bool, admin_id=None) -> DonorRegistration:
        """
        Approve or reject a pending registration.

        ``admin_id`` defaults to the signed-in admin and may not name anyone
        else. Profile.role and Profile.total_donations are left as they are.
        """
        self.ctx.require(Resource.DONOR_REGISTRATION, Action.APPROVE)
        if admin_id is not None and str(admin_id) != str(self.ctx.principal_id):
            raise NotAuthorized(message="Decisions are recorded under the signed-in admin")
        admin_id = self.ctx.principal_id

        registration = self._get_any(registration_id)
        if registration.is_decided:
            REGISTRATION_DECIDED_TOTAL.labels(decision="already_decided").inc()
            raise AlreadyDecided(detail=[f"Current status: {registration.status}"])

        new_status = "approved" if approve else "rejected"
        now = timezone.now()
        updated = DonorRegistration.objects.filter(
            pk=registration.pk, status="pending"
        ).update(
            status=new_status,
            approved_by=admin_id,
            approved_at=now,
            updated_at=now,
        )
        if updated == 0:
            # Another decision landed between the read and the update
            REGISTRATION_DECIDED_TOTAL.labels(decision="already_decided").inc()
            raise AlreadyDecided()

        registration.refresh_from_db()
        REGISTRATION_DECIDED_TOTAL.labels(decision=new_status).inc()
        logger.info(
            "donor_registration_decided",
            registration_id=str(registration.id),
            decision=new_status,
            admin_id=str(admin_id),
        )

        queue_notification(send_registration_decision_email, "registration_decision", registration.id)
        return registration

    @store_operation("list_pending_registrations")
    def list_pending(self, limit: int = 10):
        self.ctx.require(Resource.ADMIN_PANEL, Action.READ)
        return list(
            DonorRegistration.objects.filter(status="pending").order_by("-created_at")[:limit]
        )

    def list_visible(self, status=None):
        """Registrations the caller may see: all for admins, own otherwise."""
        queryset = self._scoped(Resource.DONOR_REGISTRATION, DonorRegistration.objects.all(), "user_id")
        if status and status != "all":
            queryset = queryset.filter(status=status)
        return queryset.order_by("-created_at")

    @store_operation("get_registration")
    def get(self, registration_id) -> DonorRegistration:
        queryset = self._scoped(Resource.DONOR_REGISTRATION, DonorRegistration.objects.all(), "user_id")
        pk = parse_uuid(registration_id)
        if pk is None:
            raise NotFound(message="Registration not found")
        try:
            return queryset.get(pk=pk)
        except DonorRegistration.DoesNotExist:
            raise NotFound(message="Registration not found")

    # ------------------------------------------------------------------
    # Donation history
    # ------------------------------------------------------------------
    def list_donations(self, search=None, status=None):
        """
        Donation history visible to the caller, newest first.

        ``search`` matches donor name, blood type or location.
        """
        queryset = self._scoped(Resource.DONATION, Donation.objects.all(), "donor_id")
        if status and status != "all":
            queryset = queryset.filter(status=status)
        if search:
            donor_ids = Profile.objects.filter(full_name__icontains=search).values("pk")
            queryset = queryset.filter(
                Q(donor_id__in=donor_ids)
                | Q(blood_type__icontains=search)
                | Q(location__icontains=search)
            )
        return queryset.order_by("-donation_date")

    def _scoped(self, resource, queryset, owner_field):
        scope = history_scope(self.ctx.profile, resource)
        if scope == SCOPE_ALL:
            return queryset
        if scope == SCOPE_OWN:
            return queryset.filter(**{owner_field: self.ctx.profile.pk})
        return queryset.none()

    def _get_any(self, registration_id) -> DonorRegistration:
        pk = parse_uuid(registration_id)
        if pk is None:
            raise NotFound(message="Registration not found")
        try:
            return DonorRegistration.objects.get(pk=pk)
        except DonorRegistration.DoesNotExist:
            raise NotFound(message="Registration not found")

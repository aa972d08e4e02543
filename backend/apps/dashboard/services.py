"""
Dashboard statistics. Count queries only; rows are never loaded to be counted.
"""

from dataclasses import asdict, dataclass

from django.db.models import F

from apps.accounts.models import Profile
from apps.blood_requests.models import BloodRequest
from apps.core.exceptions import store_operation
from apps.core.gate import Action, Resource, Role
from apps.donors.models import Donation, DonorRegistration
from apps.hospitals.models import HospitalRecord
from apps.stock.models import BloodStockEntry
from apps.stock.services import blood_type_sort_key


@dataclass
class PublicStats:
    active_donors: int
    completed_donations: int
    pending_requests: int
    critical_stock: int


@dataclass
class AdminOverview:
    total_users: int
    pending_registrations: int
    active_requests: int
    active_hospitals: int


class DashboardService:
    """Aggregates for the dashboard and the admin panel."""

    def __init__(self, ctx):
        self.ctx = ctx

    @store_operation("dashboard_stats")
    def public_stats(self) -> dict:
        self.ctx.require(Resource.DASHBOARD, Action.READ)
        stats = PublicStats(
            active_donors=Profile.objects.filter(role=Role.DONOR.value, is_active=True).count(),
            completed_donations=Donation.objects.filter(status="completed").count(),
            pending_requests=BloodRequest.objects.filter(status="pending").count(),
            critical_stock=BloodStockEntry.objects.filter(status="critical").count(),
        )
        return asdict(stats)

    @store_operation("dashboard_stock_summary")
    def stock_summary(self) -> list:
        self.ctx.require(Resource.BLOOD_STOCK, Action.READ)
        rows = BloodStockEntry.objects.annotate(
            available=F("quantity") - F("reserved_quantity")
        ).only("blood_type", "quantity", "reserved_quantity", "status")
        return [
            {
                "blood_type": row.blood_type,
                "quantity": row.quantity,
                "available_quantity": row.available,
                "status": row.status,
            }
            for row in sorted(rows, key=blood_type_sort_key)
        ]

    @store_operation("admin_overview")
    def admin_overview(self) -> dict:
        self.ctx.require(Resource.ADMIN_PANEL, Action.READ)
        overview = AdminOverview(
            total_users=Profile.objects.count(),
            pending_registrations=DonorRegistration.objects.filter(status="pending").count(),
            active_requests=BloodRequest.objects.filter(status__in=BloodRequest.ACTIVE_STATUSES).count(),
            active_hospitals=HospitalRecord.objects.filter(is_active=True).count(),
        )
        return asdict(overview)

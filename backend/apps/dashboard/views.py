"""
Dashboard views.
"""

from rest_framework.response import Response
from rest_framework.views import APIView

from apps.blood_requests.serializers import BloodRequestListSerializer
from apps.blood_requests.services import RequestWorkflow
from apps.core.gate import Resource
from apps.core.permissions import get_auth_context
from apps.donors.serializers import DonorRegistrationListSerializer
from apps.donors.services import RegistrationWorkflow

from .services import DashboardService


class DashboardView(APIView):
    """Headline numbers and the stock summary shown to every signed-in user."""

    gate_resource = Resource.DASHBOARD

    def get(self, request):
        service = DashboardService(get_auth_context(request))
        return Response({
            "stats": service.public_stats(),
            "stock": service.stock_summary(),
        })


class AdminOverviewView(APIView):
    """Admin panel: totals plus the latest pending registrations and active requests."""

    gate_resource = Resource.ADMIN_PANEL

    def get(self, request):
        ctx = get_auth_context(request)
        registrations = RegistrationWorkflow(ctx).list_pending()
        requests = RequestWorkflow(ctx).list_active()
        return Response({
            "overview": DashboardService(ctx).admin_overview(),
            "pending_registrations": DonorRegistrationListSerializer(registrations, many=True).data,
            "active_requests": BloodRequestListSerializer(requests, many=True).data,
        })

"""
Blood stock views.
"""

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.gate import Action, Resource
from apps.core.permissions import get_auth_context

from .serializers import BloodStockSerializer
from .services import StockLedger


class BloodStockViewSet(viewsets.ViewSet):
    """
    list: All entries ordered by blood type
    retrieve: One entry, by blood type (URL-encode "+" as %2B)
    create: Admin adds the entry of a blood type
    partial_update: Admin changes status, location, batch, notes, expiry, reservation
    quantity: Admin sets the units on hand
    suggest_status: Threshold classification of a quantity (?quantity=12)
    """

    gate_resource = Resource.BLOOD_STOCK
    gate_actions = {
        "quantity": Action.UPDATE,
        "suggest_status": Action.READ,
    }
    lookup_field = "blood_type"
    lookup_value_regex = r"[ABO]{1,2}[+-]"

    def get_ledger(self):
        return StockLedger(get_auth_context(self.request))

    def list(self, request):
        entries = self.get_ledger().list_all()
        return Response(BloodStockSerializer(entries, many=True).data)

    def retrieve(self, request, blood_type=None):
        entry = self.get_ledger().get(blood_type)
        return Response(BloodStockSerializer(entry).data)

    def create(self, request):
        entry = self.get_ledger().create_entry(request.data)
        return Response(BloodStockSerializer(entry).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, blood_type=None):
        entry = self.get_ledger().update_details(blood_type, request.data)
        return Response(BloodStockSerializer(entry).data)

    @action(detail=True, methods=["post"])
    def quantity(self, request, blood_type=None):
        entry = self.get_ledger().set_quantity(blood_type, request.data.get("quantity"))
        return Response(BloodStockSerializer(entry).data)

    @action(detail=False, methods=["get"], url_path="suggest-status")
    def suggest_status(self, request):
        quantity = request.query_params.get("quantity")
        return Response({
            "quantity": quantity,
            "suggested_status": self.get_ledger().suggest_status(quantity),
        })

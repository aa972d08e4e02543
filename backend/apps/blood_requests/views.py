"""
Blood request views.
"""

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.gate import Action, Resource
from apps.core.permissions import get_auth_context

from .serializers import (
    BloodRequestListSerializer,
    BloodRequestSerializer,
    DecisionSerializer,
    FulfillSerializer,
)
from .services import RequestWorkflow


class BloodRequestViewSet(viewsets.ViewSet):
    """
    list: Requests visible to the caller (?status=pending)
    retrieve: One request
    create: Submit a request (always pending)
    decide: Admin approves or rejects a pending request
    fulfill: Admin hands out units for an approved request
    cancel: Admin cancels an approved request
    active: Latest pending and approved requests for the admin panel
    """

    gate_resource = Resource.BLOOD_REQUEST
    gate_actions = {
        "decide": Action.APPROVE,
        "fulfill": Action.FULFILL,
        "cancel": Action.CANCEL,
        "active": Action.READ,
    }

    def get_workflow(self):
        return RequestWorkflow(get_auth_context(self.request))

    def list(self, request):
        requests = self.get_workflow().list_visible(status=request.query_params.get("status"))
        return Response(BloodRequestListSerializer(requests, many=True).data)

    def retrieve(self, request, pk=None):
        blood_request = self.get_workflow().get(pk)
        return Response(BloodRequestSerializer(blood_request).data)

    def create(self, request):
        blood_request = self.get_workflow().submit(request.data)
        return Response(
            BloodRequestSerializer(blood_request).data,
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["post"])
    def decide(self, request, pk=None):
        serializer = DecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        blood_request = self.get_workflow().decide(pk, serializer.validated_data["approve"])
        return Response(BloodRequestSerializer(blood_request).data)

    @action(detail=True, methods=["post"])
    def fulfill(self, request, pk=None):
        serializer = FulfillSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        blood_request = self.get_workflow().fulfill(
            pk,
            serializer.validated_data["fulfilled_quantity"],
            notes=serializer.validated_data.get("notes"),
        )
        return Response(BloodRequestSerializer(blood_request).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        blood_request = self.get_workflow().cancel(pk)
        return Response(BloodRequestSerializer(blood_request).data)

    @action(detail=False, methods=["get"])
    def active(self, request):
        requests = self.get_workflow().list_active()
        return Response(BloodRequestListSerializer(requests, many=True).data)

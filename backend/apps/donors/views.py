"""
Donor registration and donation views.
"""

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.accounts.models import Profile
from apps.core.gate import Action, Resource
from apps.core.permissions import get_auth_context

from .serializers import (
    DecisionSerializer,
    DonationSerializer,
    DonorRegistrationListSerializer,
    DonorRegistrationSerializer,
)
from .services import RegistrationWorkflow


class DonorRegistrationViewSet(viewsets.ViewSet):
    """
    list: Registrations visible to the caller (?status=pending)
    retrieve: One registration
    create: Submit a registration (always pending)
    decide: Admin approves or rejects a pending registration
    pending: Latest pending registrations for the admin panel
    """

    gate_resource = Resource.DONOR_REGISTRATION
    gate_actions = {
        "decide": Action.APPROVE,
        "pending": Action.READ,
    }

    def get_workflow(self):
        return RegistrationWorkflow(get_auth_context(self.request))

    def list(self, request):
        registrations = self.get_workflow().list_visible(
            status=request.query_params.get("status")
        )
        return Response(DonorRegistrationListSerializer(registrations, many=True).data)

    def retrieve(self, request, pk=None):
        registration = self.get_workflow().get(pk)
        return Response(DonorRegistrationSerializer(registration).data)

    def create(self, request):
        registration = self.get_workflow().submit(request.data)
        return Response(
            DonorRegistrationSerializer(registration).data,
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["post"])
    def decide(self, request, pk=None):
        serializer = DecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        registration = self.get_workflow().decide(pk, serializer.validated_data["approve"])
        return Response(DonorRegistrationSerializer(registration).data)

    @action(detail=False, methods=["get"])
    def pending(self, request):
        registrations = self.get_workflow().list_pending()
        return Response(DonorRegistrationListSerializer(registrations, many=True).data)


class DonationViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Donation history. Admins see every donation, others their own.

    Query params: ?search=<donor name | blood type | location>&status=<status>
    """

    serializer_class = DonationSerializer
    gate_resource = Resource.DONATION

    def get_queryset(self):
        workflow = RegistrationWorkflow(get_auth_context(self.request))
        return workflow.list_donations(
            search=self.request.query_params.get("search"),
            status=self.request.query_params.get("status"),
        )

    def list(self, request):
        return Response(self.serialize(list(self.get_queryset())))

    def retrieve(self, request, pk=None):
        return Response(self.serialize([self.get_object()])[0])

    def serialize(self, donations):
        # donor_id is a weak reference; resolve names in one query
        donor_ids = {d.donor_id for d in donations if d.donor_id}
        donors = Profile.objects.in_bulk(donor_ids) if donor_ids else {}
        return DonationSerializer(donations, many=True, context={"donors": donors}).data

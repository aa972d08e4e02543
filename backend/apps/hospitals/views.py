"""
Hospital views.
"""

import structlog
from rest_framework import mixins, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.exceptions import store_operation
from apps.core.gate import Action, Resource
from apps.core.permissions import get_auth_context

from .models import HospitalRecord
from .serializers import HospitalOptionSerializer, HospitalSerializer

logger = structlog.get_logger(__name__)


class HospitalViewSet(
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.ListModelMixin,
    viewsets.GenericViewSet,
):
    """
    list: Active hospitals ordered by name (admins may add ?include_inactive=1)
    retrieve: One hospital
    create / update: Admin only
    picker: Compact list for the blood request form
    """

    queryset = HospitalRecord.objects.all()
    serializer_class = HospitalSerializer
    gate_resource = Resource.HOSPITAL
    gate_actions = {"picker": Action.READ}

    def get_queryset(self):
        queryset = super().get_queryset().order_by("name")
        ctx = get_auth_context(self.request)

        show_inactive = ctx.can(Resource.HOSPITAL, Action.UPDATE) and (
            self.detail or self.request.query_params.get("include_inactive")
        )
        if not show_inactive:
            queryset = queryset.filter(is_active=True)

        city = self.request.query_params.get("city")
        if city:
            queryset = queryset.filter(city__iexact=city)

        return queryset

    @action(detail=False, methods=["get"])
    def picker(self, request):
        serializer = HospitalOptionSerializer(self.get_queryset(), many=True)
        return Response(serializer.data)

    @store_operation("create_hospital")
    def perform_create(self, serializer):
        get_auth_context(self.request).require(Resource.HOSPITAL, Action.CREATE)
        hospital = serializer.save()
        logger.info("hospital_created", hospital_id=str(hospital.pk))

    @store_operation("update_hospital")
    def perform_update(self, serializer):
        get_auth_context(self.request).require(Resource.HOSPITAL, Action.UPDATE)
        hospital = serializer.save()
        logger.info("hospital_updated", hospital_id=str(hospital.pk))

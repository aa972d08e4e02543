"""
Session and own-profile views.
"""

import structlog
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.exceptions import NotFound
from apps.core.gate import Action, Resource
from apps.core.permissions import get_auth_context

from .context import AuthContext
from .serializers import (
    ProfileSerializer,
    SignInSerializer,
    SignUpSerializer,
    session_payload,
)

logger = structlog.get_logger(__name__)


class SignInView(APIView):
    """Open a session with email and password."""

    gate_resource = Resource.AUTH

    def post(self, request):
        serializer = SignInSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        ctx = AuthContext.anonymous()
        ctx.sign_in(
            serializer.validated_data["email"],
            serializer.validated_data["password"],
        )
        return Response(session_payload(ctx))


class SignUpView(APIView):
    """Create an account and open its first session."""

    gate_resource = Resource.AUTH

    def post(self, request):
        serializer = SignUpSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        ctx = AuthContext.anonymous()
        ctx.sign_up(**serializer.validated_data)
        return Response(session_payload(ctx), status=status.HTTP_201_CREATED)


class SignOutView(APIView):
    gate_resource = Resource.PROFILE
    gate_actions = {"POST": Action.READ}

    def post(self, request):
        get_auth_context(request).sign_out()
        return Response(status=status.HTTP_204_NO_CONTENT)


class RefreshSessionView(APIView):
    """Rotate the session token. The old token stops working."""

    gate_resource = Resource.PROFILE
    gate_actions = {"POST": Action.READ}

    def post(self, request):
        ctx = get_auth_context(request)
        ctx.refresh()
        return Response(session_payload(ctx))


class ProfileView(APIView):
    """
    GET: the caller's own profile.
    PATCH: self-service update (admin-only fields are refused).
    """

    gate_resource = Resource.PROFILE

    def get(self, request):
        ctx = get_auth_context(request)
        if ctx.profile is None:
            raise NotFound(message="Profile not found")
        return Response(ProfileSerializer(ctx.profile).data)

    def patch(self, request):
        ctx = get_auth_context(request)
        updates = {key: request.data[key] for key in request.data}
        profile = ctx.update_profile(updates)
        return Response(ProfileSerializer(profile).data)

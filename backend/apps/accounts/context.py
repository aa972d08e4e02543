"""
Auth context: one client session's principal, profile and gate.

Workflows take an AuthContext in their constructor instead of reading a
global "current user". Each HTTP request gets its own context from
SessionTokenAuthentication; tests build as many as they need.
"""

from typing import Optional

import structlog
from django.db import transaction

from apps.core.exceptions import NotAuthorized, NotFound, store_operation
from apps.core.gate import Action, Resource, can_access

from . import services
from .models import Principal, Profile
from .profiles import ProfileResolver
from .providers import BaseAuthProvider, get_auth_provider
from .session import SessionStore

logger = structlog.get_logger(__name__)


class AuthContext:

    def __init__(self, provider: Optional[BaseAuthProvider] = None):
        self.provider = provider or get_auth_provider()
        self.session = SessionStore(self.provider)
        self.profiles = ProfileResolver(self.session)

    @classmethod
    def anonymous(cls):
        return cls()

    @classmethod
    def from_token(cls, access_token: str) -> Optional["AuthContext"]:
        """Context for an existing session token, or None when the token is not valid."""
        ctx = cls()
        if ctx.session.restore(access_token) is None:
            ctx.close()
            return None
        return ctx

    @property
    def principal(self) -> Optional[Principal]:
        return self.session.get_current_principal()

    @property
    def principal_id(self):
        principal = self.principal
        return principal.pk if principal else None

    @property
    def profile(self) -> Optional[Profile]:
        return self.profiles.profile

    @property
    def access_token(self) -> Optional[str]:
        return self.session.access_token

    @property
    def is_authenticated(self) -> bool:
        return self.principal is not None

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------
    def sign_in(self, email: str, password: str) -> Profile:
        self.session.sign_in(email, password)
        return self.profile

    def sign_up(
        self,
        email: str,
        password: str,
        full_name: str,
        role: str = "public",
        hospital_name: Optional[str] = None,
        hospital_address: Optional[str] = None,
        **extra,
    ) -> Profile:
        """
        Create Principal, then Profile, then (for hospitals) a HospitalRecord,
        and sign in.

        Principal and Profile are written together. The HospitalRecord is
        best effort: if it fails the sign-up still completes.
        """
        role = role or "public"
        errors = services.validate_sign_up(email, password, full_name, role)
        profile_fields = services.clean_profile_extra(extra, errors)
        errors.raise_if_any()

        with transaction.atomic():
            principal = self.session.sign_up(email, password)
            profile = self._create_profile(principal, full_name, role, profile_fields)

        if role == "hospital" and hospital_name and hospital_name.strip():
            services.register_hospital(profile, hospital_name, hospital_address)

        logger.info("sign_up_completed", principal_id=str(principal.pk), role=role)
        return self.sign_in(email, password)

    def sign_out(self):
        self.session.sign_out()

    def refresh(self) -> str:
        return self.session.refresh()

    def close(self):
        self.profiles.close()
        self.session.close()

    # ------------------------------------------------------------------
    # Gate
    # ------------------------------------------------------------------
    def can(self, resource, action, owner_id=None) -> bool:
        return can_access(self.profile, resource, action, owner_id=owner_id)

    def require(self, resource, action, owner_id=None):
        """Authoritative check before a mutation. Raises NotAuthorized."""
        if not self.can(resource, action, owner_id=owner_id):
            logger.warning(
                "access_denied",
                principal_id=str(self.principal_id) if self.principal_id else None,
                role=self.profile.role if self.profile else None,
                resource=Resource(resource).value,
                action=Action(action).value,
            )
            raise NotAuthorized()

    # ------------------------------------------------------------------
    # Own profile
    # ------------------------------------------------------------------
    def update_profile(self, updates: dict) -> Profile:
        profile = self.profile
        if profile is None:
            raise NotAuthorized()
        self.require(Resource.PROFILE, Action.UPDATE, owner_id=profile.pk)

        cleaned = services.clean_profile_updates(updates)
        if cleaned:
            self._save_profile(profile.pk, cleaned)
            logger.info(
                "profile_updated",
                profile_id=str(profile.pk),
                fields=sorted(cleaned),
            )
        return self.profiles.refresh_profile(profile.pk)

    @store_operation("create_profile")
    def _create_profile(self, principal, full_name, role, fields):
        return services.create_profile(principal, full_name, role, **fields)

    @store_operation("update_profile")
    def _save_profile(self, profile_id, cleaned):
        try:
            profile = Profile.objects.get(pk=profile_id)
        except Profile.DoesNotExist:
            raise NotFound(message="Profile not found")
        for field, value in cleaned.items():
            setattr(profile, field, value)
        profile.save(update_fields=[*cleaned, "updated_at"])

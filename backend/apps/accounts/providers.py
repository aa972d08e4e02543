"""
Auth provider binding.

The rest of the code talks to ``BaseAuthProvider`` only. A provider owns the
raw session (token + principal) of one client and tells subscribers about
every session transition.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional

import structlog
from django.conf import settings
from django.contrib.auth import authenticate
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils.module_loading import import_string
from rest_framework.authtoken.models import Token

from apps.core.exceptions import EmailInUse, InvalidCredentials, WeakCredential

from .models import Principal

logger = structlog.get_logger(__name__)


class AuthEvent:
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


@dataclass(frozen=True)
class Session:
    access_token: str
    principal: Principal


AuthCallback = Callable[[str, Optional[Session]], None]


class Subscription:
    """Handle returned by ``on_auth_state_change``."""

    def __init__(self, provider, callback):
        self._provider = provider
        self.callback = callback

    def unsubscribe(self):
        self._provider._remove_listener(self.callback)


class BaseAuthProvider(ABC):

    def __init__(self):
        self._session: Optional[Session] = None
        self._listeners: List[AuthCallback] = []

    def get_session(self) -> Optional[Session]:
        return self._session

    def on_auth_state_change(self, callback: AuthCallback) -> Subscription:
        self._listeners.append(callback)
        return Subscription(self, callback)

    def _remove_listener(self, callback):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _set_session(self, event: str, session: Optional[Session]):
        self._session = session
        for callback in list(self._listeners):
            callback(event, session)

    @abstractmethod
    def sign_in_with_password(self, email: str, password: str) -> Session:
        """Open a session. Raises InvalidCredentials."""

    @abstractmethod
    def sign_up(self, email: str, password: str) -> Principal:
        """Create a principal without opening a session. Raises EmailInUse or WeakCredential."""

    @abstractmethod
    def sign_out(self) -> None:
        """End the current session, if any."""

    @abstractmethod
    def restore_session(self, access_token: str) -> Optional[Session]:
        """Re-attach an existing session token. Returns None when it is not valid."""

    @abstractmethod
    def refresh_session(self) -> Session:
        """Rotate the token of the current session."""


class DjangoAuthProvider(BaseAuthProvider):
    """
    Provider backed by Django's password hashing and DRF auth tokens.

    One token per principal; signing out revokes it.
    """

    def sign_in_with_password(self, email, password):
        principal = authenticate(email=(email or "").strip().lower(), password=password)
        if principal is None:
            logger.info("sign_in_rejected")
            raise InvalidCredentials()

        token, _ = Token.objects.get_or_create(user=principal)
        session = Session(access_token=token.key, principal=principal)
        self._set_session(AuthEvent.SIGNED_IN, session)
        return session

    def sign_up(self, email, password):
        email = Principal.objects.normalize_email((email or "").strip()).lower()
        if Principal.objects.filter(email__iexact=email).exists():
            raise EmailInUse()

        try:
            validate_password(password, user=Principal(email=email))
        except DjangoValidationError as e:
            raise WeakCredential(detail=e.messages)

        try:
            with transaction.atomic():
                principal = Principal.objects.create_user(email=email, password=password)
        except IntegrityError:
            raise EmailInUse()
        return principal

    def sign_out(self):
        if self._session is not None:
            Token.objects.filter(key=self._session.access_token).delete()
        self._set_session(AuthEvent.SIGNED_OUT, None)

    def restore_session(self, access_token):
        try:
            token = Token.objects.select_related("user").get(key=access_token)
        except Token.DoesNotExist:
            return None
        if not token.user.is_active:
            return None

        session = Session(access_token=token.key, principal=token.user)
        self._set_session(AuthEvent.INITIAL_SESSION, session)
        return session

    def refresh_session(self):
        if self._session is None:
            raise InvalidCredentials(message="No active session to refresh")

        principal = self._session.principal
        with transaction.atomic():
            Token.objects.filter(user=principal).delete()
            token = Token.objects.create(user=principal)
        session = Session(access_token=token.key, principal=principal)
        self._set_session(AuthEvent.TOKEN_REFRESHED, session)
        return session


def get_auth_provider() -> BaseAuthProvider:
    """Factory: build the provider configured in ``AUTH_PROVIDER_CLASS``."""
    provider_class = import_string(settings.AUTH_PROVIDER_CLASS)
    return provider_class()

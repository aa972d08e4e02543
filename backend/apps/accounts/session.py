"""
Session store: the current principal of one client session.
"""

from typing import Callable, List, Optional

import structlog
from prometheus_client import Counter

from apps.core.exceptions import InvalidCredentials, store_operation

from .models import Principal
from .providers import BaseAuthProvider

logger = structlog.get_logger(__name__)

SESSION_EVENTS_TOTAL = Counter(
    "session_events_total",
    "Session transitions seen by session stores",
    ["event"],  # INITIAL_SESSION, SIGNED_IN, SIGNED_OUT, TOKEN_REFRESHED
)
SIGN_IN_ATTEMPTS_TOTAL = Counter(
    "sign_in_attempts_total",
    "Password sign-in attempts",
    ["result"],  # success, invalid_credentials
)

SessionListener = Callable[[str, Optional[Principal]], None]


class SessionStore:
    """
    Wraps an auth provider and tracks who is signed in.

    Listeners registered with ``on_session_change`` are called synchronously,
    in registration order, on every transition the provider reports.
    """

    def __init__(self, provider: BaseAuthProvider):
        self._provider = provider
        self._listeners: List[SessionListener] = []
        session = provider.get_session()
        self._principal: Optional[Principal] = session.principal if session else None
        self._subscription = provider.on_auth_state_change(self._handle_auth_event)

    @property
    def provider(self):
        return self._provider

    def get_current_principal(self) -> Optional[Principal]:
        return self._principal

    @property
    def access_token(self) -> Optional[str]:
        session = self._provider.get_session()
        return session.access_token if session else None

    def on_session_change(self, listener: SessionListener):
        """Register a listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @store_operation("sign_in")
    def sign_in(self, email: str, password: str) -> Principal:
        try:
            session = self._provider.sign_in_with_password(email, password)
        except InvalidCredentials:
            SIGN_IN_ATTEMPTS_TOTAL.labels(result="invalid_credentials").inc()
            raise
        SIGN_IN_ATTEMPTS_TOTAL.labels(result="success").inc()
        return session.principal

    @store_operation("sign_up")
    def sign_up(self, email: str, password: str) -> Principal:
        return self._provider.sign_up(email, password)

    @store_operation("sign_out")
    def sign_out(self):
        self._provider.sign_out()

    @store_operation("restore_session")
    def restore(self, access_token: str) -> Optional[Principal]:
        session = self._provider.restore_session(access_token)
        return session.principal if session else None

    @store_operation("refresh_session")
    def refresh(self) -> str:
        return self._provider.refresh_session().access_token

    def close(self):
        self._subscription.unsubscribe()
        self._listeners.clear()

    def _handle_auth_event(self, event, session):
        self._principal = session.principal if session else None
        SESSION_EVENTS_TOTAL.labels(event=event).inc()
        logger.info(
            "session_changed",
            session_event=event,
            principal_id=str(self._principal.pk) if self._principal else None,
        )
        for listener in list(self._listeners):
            listener(event, self._principal)


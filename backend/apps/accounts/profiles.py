"""
Profile resolver: loads and caches the Profile of the current principal.
"""

from typing import Callable, List, Optional

import structlog

from apps.core.exceptions import NotFound, StoreUnavailable, store_operation

from .models import Profile
from .providers import AuthEvent
from .session import SessionStore

logger = structlog.get_logger(__name__)

ProfileListener = Callable[[Optional[Profile]], None]


class ProfileResolver:
    """
    Keeps the current principal's Profile in sync with the session store.

    - A new principal (initial session or sign-in) triggers exactly one load.
    - A token refresh for the principal already cached does not refetch.
    - Sign-out drops the cache.

    Every load takes a generation number. When a newer session event arrives
    while an older fetch is still running, the older result is discarded
    instead of overwriting the newer state.
    """

    def __init__(self, session_store: SessionStore):
        self._session = session_store
        self._profile: Optional[Profile] = None
        self._generation = 0
        self._listeners: List[ProfileListener] = []
        self._unsubscribe = session_store.on_session_change(self._handle_session_change)

    @property
    def profile(self) -> Optional[Profile]:
        return self._profile

    def on_profile_change(self, listener: ProfileListener):
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def load_profile(self, principal_id) -> Profile:
        """Fetch the profile for ``principal_id`` and cache it. Raises NotFound."""
        self._generation += 1
        return self._fetch(principal_id, self._generation)

    def refresh_profile(self, principal_id=None) -> Profile:
        """Re-fetch after a mutation. Defaults to the signed-in principal."""
        if principal_id is None:
            principal = self._session.get_current_principal()
            if principal is None:
                raise NotFound(message="No signed-in principal")
            principal_id = principal.pk
        return self.load_profile(principal_id)

    def clear(self):
        self._generation += 1
        changed = self._profile is not None
        self._profile = None
        if changed:
            self._notify()

    def close(self):
        self._unsubscribe()
        self._listeners.clear()

    @store_operation("load_profile")
    def _fetch(self, principal_id, generation) -> Profile:
        try:
            profile = Profile.objects.get(pk=principal_id)
        except Profile.DoesNotExist:
            raise NotFound(message="Profile not found")

        if generation != self._generation:
            logger.info(
                "stale_profile_fetch_discarded",
                principal_id=str(principal_id),
                generation=generation,
                current_generation=self._generation,
            )
            return profile

        self._profile = profile
        self._notify()
        return profile

    def _notify(self):
        for listener in list(self._listeners):
            listener(self._profile)

    def _handle_session_change(self, event, principal):
        if principal is None:
            self.clear()
            return

        cached = self._profile
        if (
            event == AuthEvent.TOKEN_REFRESHED
            and cached is not None
            and cached.pk == principal.pk
        ):
            return

        if cached is not None and cached.pk != principal.pk:
            self.clear()

        try:
            self.load_profile(principal.pk)
        except (NotFound, StoreUnavailable) as e:
            # The session stays open; the gate denies everything without a profile.
            logger.error(
                "profile_fetch_failed",
                principal_id=str(principal.pk),
                error_code=e.code,
            )

"""
Session/account state machine.

Turns a raw provider session into an authorized, status-checked profile and
publishes every state change to subscribers.

Transitions:
- sign_in:  SIGNED_OUT -> AUTHENTICATING -> SIGNED_IN
                                         -> DENIED -> SIGNED_OUT
            provider rejection           -> SIGNED_OUT (CredentialRejected)
- restore:  stored/bearer tokens -> SIGNED_IN, or DENIED -> SIGNED_OUT
- provider change events (token refresh, external sign-out) outside a flow
  run the same admission check
- sign_out: always ends at SIGNED_OUT, even if the provider call fails

Admission (`_admit`) fetches the profile fresh and applies the status guard.
Any denial terminates the provider session before control returns, so the
reported state and the provider's state never diverge.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, Optional

from supabase import Client

from domain.profile import Profile
from domain.session import ProviderSession, SessionPhase, SessionState
from domain.status_guard import DenialReason, evaluate
from repositories.errors import StoreError
from repositories.profile_repository import get_profile_by_user_id
from services.auth_errors import (
    AccountFlowError,
    CredentialRejected,
    ProfileLookupFailed,
    denial_error,
)
from services.auth_provider import AuthProvider, ProviderError, SupabaseAuthProvider

logger = logging.getLogger(__name__)

Listener = Callable[[SessionState], None]


class SessionManager:
    """
    Owns the session state for one store client.

    One manager per client: the HTTP layer builds a fresh client and manager
    per request; a long-lived process may keep one for its lifetime.

    Example:
        manager = SessionManager(client)
        unsubscribe = manager.subscribe(lambda state: print(state.phase))
        profile = manager.sign_in("buyer@example.com", "secret")
        manager.sign_out()
    """

    def __init__(self, client: Client, provider: Optional[AuthProvider] = None) -> None:
        self._client = client
        self._provider: AuthProvider = provider or SupabaseAuthProvider(client)
        self._state = SessionState.signed_out()
        self._listeners: Dict[int, Listener] = {}
        self._next_listener_id = 0
        self._driving = False
        self._unsubscribe_provider: Optional[Callable[[], None]] = self._provider.on_change(
            self._on_provider_change
        )

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def profile(self) -> Optional[Profile]:
        return self._state.profile

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for state changes. Returns an unsubscribe callable."""

        listener_id = self._next_listener_id
        self._next_listener_id += 1
        self._listeners[listener_id] = listener

        def _unsubscribe() -> None:
            self._listeners.pop(listener_id, None)

        return _unsubscribe

    def close(self) -> None:
        """Detach from the provider's change events and drop all listeners."""

        if self._unsubscribe_provider is not None:
            self._unsubscribe_provider()
            self._unsubscribe_provider = None
        self._listeners.clear()

    # ------------------------------------------------------------------
    # Flows
    # ------------------------------------------------------------------

    def sign_in(self, email: str, password: str) -> Profile:
        """
        Check credentials with the provider, then admit the profile.

        Raises:
            CredentialRejected: the provider refused the credentials
            AccountBlocked / AccountDeleted / AccountMissing: status guard denial
            ProfileLookupFailed: the profile could not be fetched
        """

        logger.info("Sign in attempt", extra={"email": email})

        with self._flow():
            self._transition(SessionState.authenticating())
            try:
                session = self._provider.sign_in(email, password)
            except ProviderError as exc:
                logger.warning(
                    "Sign in rejected by provider",
                    extra={"email": email, "provider_code": exc.code, "provider_status": exc.status},
                )
                self._transition(SessionState.signed_out())
                raise CredentialRejected(exc.message) from exc

            profile = self._admit(session)

        logger.info("Sign in successful", extra={"user_id": profile.user_id, "role": profile.role.value})
        return profile

    def restore(self, access_token: Optional[str] = None, refresh_token: str = "") -> Optional[Profile]:
        """
        Passive restore: re-admit an existing session.

        With tokens, the session is rebuilt from them (bearer requests);
        without, the provider's current session is used (process start-up).

        Returns:
            The admitted profile, or None when there is no usable session

        Raises:
            AccountBlocked / AccountDeleted / AccountMissing / ProfileLookupFailed
        """

        with self._flow():
            try:
                if access_token:
                    session = self._provider.restore(access_token, refresh_token)
                else:
                    session = self._provider.get_session()
            except ProviderError as exc:
                logger.info(
                    "Session restore failed",
                    extra={"provider_code": exc.code, "provider_status": exc.status},
                )
                self._transition(SessionState.signed_out())
                return None

            if session is None:
                self._transition(SessionState.signed_out())
                return None

            return self._admit(session)

    def sign_out(self) -> Optional[str]:
        """
        Sign out locally and at the provider.

        Returns:
            None on success, or the provider's error message when the remote
            sign-out failed (local state is signed out either way)
        """

        remote_error: Optional[str] = None
        with self._flow():
            try:
                self._provider.sign_out()
            except ProviderError as exc:
                remote_error = exc.message
                logger.warning(
                    "Provider sign out failed; local session cleared anyway",
                    extra={"provider_code": exc.code, "provider_status": exc.status},
                )
            self._transition(SessionState.signed_out())
        return remote_error

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _admit(self, session: ProviderSession) -> Profile:
        try:
            profile = get_profile_by_user_id(self._client, session.user_id)
        except StoreError as exc:
            logger.error(
                "Profile lookup failed during admission",
                extra={"user_id": session.user_id, "store_code": exc.code, "error": str(exc)},
            )
            self._terminate_provider_session(session)
            self._transition(SessionState.signed_out())
            raise ProfileLookupFailed() from exc

        decision = evaluate(profile)
        if profile is None or not decision.allowed:
            reason = decision.reason or DenialReason.NOT_FOUND
            logger.warning(
                "Account denied by status guard",
                extra={"user_id": session.user_id, "reason": reason.value},
            )
            self._terminate_provider_session(session)
            self._transition(SessionState.denied(reason))
            self._transition(SessionState.signed_out())
            raise denial_error(reason)

        self._transition(SessionState.signed_in(profile, session))
        return profile

    def _terminate_provider_session(self, session: ProviderSession) -> None:
        try:
            self._provider.sign_out()
        except ProviderError as exc:
            logger.error(
                "Forced sign out failed",
                extra={"user_id": session.user_id, "provider_code": exc.code, "error": exc.message},
            )

    def _on_provider_change(self, event: str, session: Optional[ProviderSession]) -> None:
        # Flows settle their own state; only react to changes made elsewhere
        # (token refresh timers, another holder of the client signing out).
        if self._driving:
            return

        if session is None:
            if self._state.phase is not SessionPhase.SIGNED_OUT:
                self._transition(SessionState.signed_out())
            return

        with self._flow():
            try:
                self._admit(session)
            except AccountFlowError as exc:
                logger.info(
                    "Provider session change ended the session",
                    extra={"event": event, "kind": exc.kind},
                )

    @contextmanager
    def _flow(self) -> Iterator[None]:
        previous = self._driving
        self._driving = True
        try:
            yield
        finally:
            self._driving = previous

    def _transition(self, state: SessionState) -> None:
        self._state = state
        for listener in list(self._listeners.values()):
            try:
                listener(state)
            except Exception:
                logger.exception("Session listener failed", extra={"phase": state.phase.value})


__all__ = ["SessionManager", "Listener"]

"""
Auth provider adapter.

Narrows the Supabase auth client (`client.auth`) to the operations the
account services need and converts its objects and exceptions into domain
types:

- sign_in(email, password)             -> ProviderSession
- sign_up(email, password, metadata)   -> SignUpResult
- sign_out()
- get_session()                        -> ProviderSession | None
- restore(access_token, refresh_token) -> ProviderSession
- on_change(handler)                   -> unsubscribe callable

All provider failures are raised as ProviderError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Protocol

import httpx
from supabase import Client
from supabase_auth.errors import AuthError, UserDoesntExist

from domain.session import Identity, ProviderSession

logger = logging.getLogger(__name__)

# Provider error codes meaning "this email already has an identity".
_ALREADY_REGISTERED_CODES = frozenset({"user_already_exists", "email_exists"})

SessionHandler = Callable[[str, Optional[ProviderSession]], None]


class ProviderError(Exception):
    """The auth provider rejected or failed a request."""

    def __init__(self, message: str, code: Optional[str] = None, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status

    @property
    def already_registered(self) -> bool:
        if self.code in _ALREADY_REGISTERED_CODES:
            return True
        return "already registered" in self.message.lower()


@dataclass(frozen=True, slots=True)
class SignUpResult:
    identity: Optional[Identity]
    session: Optional[ProviderSession]
    already_registered: bool = False


class AuthProvider(Protocol):
    def sign_in(self, email: str, password: str) -> ProviderSession: ...

    def sign_up(self, email: str, password: str, metadata: Mapping[str, Any]) -> SignUpResult: ...

    def sign_out(self) -> None: ...

    def get_session(self) -> Optional[ProviderSession]: ...

    def restore(self, access_token: str, refresh_token: str = "") -> ProviderSession: ...

    def on_change(self, handler: SessionHandler) -> Callable[[], None]: ...


def _to_identity(user: Any) -> Identity:
    return Identity(user_id=str(user.id), email=getattr(user, "email", None))


def _to_session(raw: Any) -> Optional[ProviderSession]:
    if raw is None:
        return None
    return ProviderSession(
        identity=_to_identity(raw.user),
        access_token=raw.access_token,
        refresh_token=raw.refresh_token or "",
        expires_at=getattr(raw, "expires_at", None),
    )


def _provider_error(exc: AuthError) -> ProviderError:
    return ProviderError(
        exc.message,
        code=getattr(exc, "code", None),
        status=getattr(exc, "status", None),
    )


class SupabaseAuthProvider:
    """AuthProvider backed by a supabase-py client."""

    def __init__(self, client: Client) -> None:
        self._auth = client.auth

    def sign_in(self, email: str, password: str) -> ProviderSession:
        try:
            response = self._auth.sign_in_with_password({"email": email, "password": password})
        except AuthError as exc:
            raise _provider_error(exc) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"Sign in request failed: {exc}") from exc

        session = _to_session(response.session)
        if session is None:
            raise ProviderError("Sign in returned no session", code="session_not_found")
        return session

    def sign_up(self, email: str, password: str, metadata: Mapping[str, Any]) -> SignUpResult:
        try:
            response = self._auth.sign_up(
                {"email": email, "password": password, "options": {"data": dict(metadata)}}
            )
        except AuthError as exc:
            error = _provider_error(exc)
            if error.already_registered:
                return SignUpResult(identity=None, session=None, already_registered=True)
            raise error from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"Sign up request failed: {exc}") from exc

        user = response.user
        if user is None:
            raise ProviderError("Sign up returned no user")

        # With email confirmation enabled the provider hides existing accounts
        # behind a user with no identities instead of returning an error.
        identities = getattr(user, "identities", None)
        if identities is not None and len(identities) == 0:
            logger.info("Sign up matched an existing identity", extra={"user_id": str(user.id)})
            return SignUpResult(identity=None, session=None, already_registered=True)

        return SignUpResult(identity=_to_identity(user), session=_to_session(response.session))

    def sign_out(self) -> None:
        try:
            self._auth.sign_out()
        except AuthError as exc:
            raise _provider_error(exc) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"Sign out request failed: {exc}") from exc

    def get_session(self) -> Optional[ProviderSession]:
        try:
            return _to_session(self._auth.get_session())
        except AuthError as exc:
            raise _provider_error(exc) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"Session lookup failed: {exc}") from exc

    def restore(self, access_token: str, refresh_token: str = "") -> ProviderSession:
        try:
            response = self._auth.set_session(access_token, refresh_token)
        except AuthError as exc:
            raise _provider_error(exc) from exc
        except UserDoesntExist as exc:
            raise ProviderError("No user exists for this token", code="user_not_found") from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"Session restore request failed: {exc}") from exc

        session = _to_session(response.session)
        if session is None:
            raise ProviderError("Session could not be restored", code="session_not_found")
        return session

    def on_change(self, handler: SessionHandler) -> Callable[[], None]:
        def _callback(event: str, raw_session: Any) -> None:
            handler(event, _to_session(raw_session))

        subscription = self._auth.on_auth_state_change(_callback)
        return subscription.unsubscribe


__all__ = [
    "AuthProvider",
    "ProviderError",
    "SignUpResult",
    "SupabaseAuthProvider",
]

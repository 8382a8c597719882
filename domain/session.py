"""
Domain: Sessions and session state.

`ProviderSession` is what the auth provider hands back after a credential
check or token refresh. `SessionState` is the application's view of it after
the status guard has run.

States:
- SIGNED_OUT      no session
- AUTHENTICATING  credential check / admission in progress
- SIGNED_IN       provider session + admitted profile
- DENIED          transient; published once, then the state settles at SIGNED_OUT
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .profile import Profile
from .status_guard import DenialReason


@dataclass(frozen=True, slots=True)
class Identity:
    """Auth-provider identity (never carries credentials)."""

    user_id: str
    email: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ProviderSession:
    identity: Identity
    access_token: str
    refresh_token: str
    expires_at: Optional[int] = None

    @property
    def user_id(self) -> str:
        return self.identity.user_id


class SessionPhase(str, Enum):
    SIGNED_OUT = "signed_out"
    AUTHENTICATING = "authenticating"
    SIGNED_IN = "signed_in"
    DENIED = "denied"


@dataclass(frozen=True, slots=True)
class SessionState:
    phase: SessionPhase
    profile: Optional[Profile] = None
    session: Optional[ProviderSession] = None
    denial: Optional[DenialReason] = None

    def __post_init__(self) -> None:
        if self.phase is SessionPhase.SIGNED_IN and (self.profile is None or self.session is None):
            raise ValueError("SIGNED_IN requires a profile and a provider session")
        if self.phase is SessionPhase.DENIED and self.denial is None:
            raise ValueError("DENIED requires a denial reason")

    @classmethod
    def signed_out(cls) -> "SessionState":
        return cls(phase=SessionPhase.SIGNED_OUT)

    @classmethod
    def authenticating(cls) -> "SessionState":
        return cls(phase=SessionPhase.AUTHENTICATING)

    @classmethod
    def signed_in(cls, profile: Profile, session: ProviderSession) -> "SessionState":
        return cls(phase=SessionPhase.SIGNED_IN, profile=profile, session=session)

    @classmethod
    def denied(cls, reason: DenialReason) -> "SessionState":
        return cls(phase=SessionPhase.DENIED, denial=reason)

    @property
    def is_signed_in(self) -> bool:
        return self.phase is SessionPhase.SIGNED_IN

    @property
    def is_admin(self) -> bool:
        return self.profile is not None and self.profile.is_admin()

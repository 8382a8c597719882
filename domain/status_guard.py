"""
Domain: Status guard.

Pure predicate deciding whether a profile may hold a session. Evaluated at
sign-in and again on every passive session restore, because credential
validity (owned by the auth provider) and account status (owned by the
application) change independently.

Rules, in order:
- No profile            -> deny (NOT_FOUND)
- role admin            -> allow, whatever the status
- status blocked        -> deny (BLOCKED)
- status deleted        -> deny (DELETED)
- active / inactive     -> allow
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .profile import AccountStatus, Profile


class DenialReason(str, Enum):
    NOT_FOUND = "not_found"
    BLOCKED = "blocked"
    DELETED = "deleted"


@dataclass(frozen=True, slots=True)
class GuardDecision:
    allowed: bool
    reason: Optional[DenialReason] = None

    @classmethod
    def allow(cls) -> "GuardDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenialReason) -> "GuardDecision":
        return cls(allowed=False, reason=reason)


def evaluate(profile: Optional[Profile]) -> GuardDecision:
    if profile is None:
        return GuardDecision.deny(DenialReason.NOT_FOUND)
    if profile.is_admin():
        return GuardDecision.allow()
    if profile.status is AccountStatus.BLOCKED:
        return GuardDecision.deny(DenialReason.BLOCKED)
    if profile.status is AccountStatus.DELETED:
        return GuardDecision.deny(DenialReason.DELETED)
    return GuardDecision.allow()


__all__ = ["DenialReason", "GuardDecision", "evaluate"]

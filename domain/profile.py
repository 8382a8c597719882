"""
Domain: Profiles (application-level accounts).

A Profile is the application's record for an authentication identity. The
identity itself (credentials, email verification) is owned by the auth
provider; the profile carries the role and lifecycle status the application
authorizes against.

Rules:
- At most one profile exists per identity (`user_id` is unique).
- Profiles are never hard-deleted. Deletion is the `deleted` status.
- Admin profiles are exempt from status-based access denial.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from .time import require_utc_timestamp


class Role(str, Enum):
    ADMIN = "admin"
    CLIENT = "client"


class AccountStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    BLOCKED = "blocked"
    DELETED = "deleted"


# Statuses an administrator may assign directly. `deleted` is reached only
# through the soft-delete operation.
ASSIGNABLE_STATUSES: frozenset[AccountStatus] = frozenset(
    {AccountStatus.ACTIVE, AccountStatus.INACTIVE, AccountStatus.BLOCKED}
)


@dataclass(frozen=True, slots=True)
class Profile:
    """
    Profile row for a single authentication identity.

    profile_id: the profile's own identifier (referenced by orders/documents)
    user_id: the auth provider's identity id
    """

    profile_id: str
    user_id: str
    email: str
    full_name: str
    role: Role
    status: AccountStatus
    phone: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
        if self.updated_at is not None:
            require_utc_timestamp("updated_at", self.updated_at)

    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def is_deleted(self) -> bool:
        return self.status is AccountStatus.DELETED


@dataclass(frozen=True, slots=True)
class RegistrationFields:
    """Fields a client submits when registering."""

    email: str
    full_name: str
    phone: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.email or "@" not in self.email:
            raise ValueError("email must be a valid address")
        if not self.full_name or not self.full_name.strip():
            raise ValueError("full_name is required")

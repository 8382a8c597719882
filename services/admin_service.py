"""
Back-office administration service.

Handles:
- Client status changes (active / inactive / blocked)
- Soft deletion of client accounts (status `deleted`; rows are never removed,
  so historical orders and documents keep their references)
- Dashboard statistics

Status changes take effect for a signed-in client on their next session
restore, when the status guard re-reads the profile.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, List, TypeVar

from supabase import Client

from domain.profile import ASSIGNABLE_STATUSES, AccountStatus, Profile, Role
from repositories.errors import StoreError
from repositories.order_repository import count_orders, paid_order_amounts
from repositories.product_repository import count_products
from repositories.profile_repository import (
    count_client_profiles,
    get_profile_by_email,
    get_profile_by_id,
    list_client_profiles,
    update_profile_role,
    update_profile_status,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ClientNotFoundError(LookupError):
    """No client profile with the given id."""


class ClientManagementError(ValueError):
    """The requested change is not allowed for this profile."""


@dataclass(frozen=True, slots=True)
class AdminDashboardStats:
    total_orders: int
    total_clients: int
    total_products: int
    total_revenue: Decimal


def list_clients(client: Client) -> List[Profile]:
    """Client accounts that have not been deleted, newest first."""

    return list_client_profiles(client, include_deleted=False)


def _require_client_profile(client: Client, profile_id: str) -> Profile:
    profile = get_profile_by_id(client, profile_id)
    if profile is None:
        raise ClientNotFoundError(f"Client not found: {profile_id}")
    if profile.is_admin():
        raise ClientManagementError("Administrator accounts cannot be managed here")
    return profile


def change_client_status(client: Client, profile_id: str, status: AccountStatus) -> Profile:
    """
    Set a client's status to active, inactive or blocked.

    Raises:
        ClientManagementError: status is `deleted` (use delete_client) or the
            target is an administrator
        ClientNotFoundError: no such profile
    """

    if status not in ASSIGNABLE_STATUSES:
        raise ClientManagementError(f"Status {status.value!r} cannot be assigned directly")

    profile = _require_client_profile(client, profile_id)
    updated = update_profile_status(client, profile.profile_id, status)

    logger.info(
        "Client status changed",
        extra={"profile_id": profile_id, "from_status": profile.status.value, "to_status": status.value},
    )
    return updated


def delete_client(client: Client, profile_id: str) -> Profile:
    """Soft-delete a client account. The client can later re-register to reactivate it."""

    profile = _require_client_profile(client, profile_id)
    updated = update_profile_status(client, profile.profile_id, AccountStatus.DELETED)

    logger.info("Client soft-deleted", extra={"profile_id": profile_id})
    return updated


def promote_to_admin(client: Client, email: str) -> Profile:
    """
    Grant the admin role to an existing profile (operator bootstrap).

    The client must hold a key allowed to change roles; row-level security
    stops a regular session from doing so.
    """

    profile = get_profile_by_email(client, email)
    if profile is None:
        raise ClientNotFoundError(f"No profile registered for {email}")
    if profile.is_admin():
        return profile

    updated = update_profile_role(client, profile.profile_id, Role.ADMIN)
    logger.info("Profile promoted to admin", extra={"profile_id": profile.profile_id})
    return updated


def _aggregate(name: str, compute: Callable[[], T], default: T) -> T:
    try:
        return compute()
    except StoreError as exc:
        logger.warning(f"Dashboard aggregate '{name}' failed", extra={"error": str(exc)})
        return default


def admin_dashboard_stats(client: Client) -> AdminDashboardStats:
    """
    Totals for the admin dashboard.

    Each aggregate is independent: one failing query is logged and reported
    as zero instead of failing the whole dashboard.
    """

    return AdminDashboardStats(
        total_orders=_aggregate("orders", lambda: count_orders(client), 0),
        total_clients=_aggregate("clients", lambda: count_client_profiles(client), 0),
        total_products=_aggregate("products", lambda: count_products(client), 0),
        total_revenue=_aggregate(
            "revenue",
            lambda: sum(paid_order_amounts(client), Decimal("0")),
            Decimal("0"),
        ),
    )


__all__ = [
    "AdminDashboardStats",
    "ClientNotFoundError",
    "ClientManagementError",
    "list_clients",
    "change_client_status",
    "delete_client",
    "promote_to_admin",
    "admin_dashboard_stats",
]

"""
Profile repository (persistence).

Persistence operations for the Profile domain entity. This module does not
decide *whether* an operation is allowed (that is the status guard's and the
services' job); it only reads and writes `profiles` rows.

Table layout (`profiles`):
- id (uuid, pk), user_id (uuid, unique), email, full_name, phone (nullable)
- role: admin | client
- client_status: active | inactive | blocked | deleted
- created_at, updated_at
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from supabase import Client

from domain.profile import AccountStatus, Profile, Role
from domain.time import parse_optional_timestamp, to_iso_utc, utc_now
from repositories.client import execute, rows_of
from repositories.errors import RowNotFoundError

_PROFILES_TABLE: str = "profiles"


def _row_to_profile(row: Mapping[str, Any]) -> Profile:
    """Convert a Supabase row into a Profile."""

    return Profile(
        profile_id=str(row["id"]),
        user_id=str(row["user_id"]),
        email=str(row["email"]),
        full_name=str(row.get("full_name") or ""),
        phone=row.get("phone"),
        role=Role(str(row.get("role") or Role.CLIENT.value)),
        status=AccountStatus(str(row.get("client_status") or AccountStatus.ACTIVE.value)),
        created_at=parse_optional_timestamp(row.get("created_at")),
        updated_at=parse_optional_timestamp(row.get("updated_at")),
    )


def get_profile_by_user_id(client: Client, user_id: str) -> Optional[Profile]:
    """
    Get the profile linked to an auth identity.

    Returns:
        Profile or None if no row exists for this identity
    """

    response = execute(
        client.table(_PROFILES_TABLE).select("*").eq("user_id", user_id).limit(1),
        "fetch profile",
    )
    rows = rows_of(response)
    if not rows:
        return None
    return _row_to_profile(rows[0])


def get_profile_by_id(client: Client, profile_id: str) -> Optional[Profile]:
    response = execute(
        client.table(_PROFILES_TABLE).select("*").eq("id", profile_id).limit(1),
        "fetch profile",
    )
    rows = rows_of(response)
    if not rows:
        return None
    return _row_to_profile(rows[0])


def get_profile_by_email(client: Client, email: str) -> Optional[Profile]:
    response = execute(
        client.table(_PROFILES_TABLE).select("*").eq("email", email).limit(1),
        "fetch profile",
    )
    rows = rows_of(response)
    if not rows:
        return None
    return _row_to_profile(rows[0])


def insert_profile(
    client: Client,
    user_id: str,
    email: str,
    full_name: str,
    phone: Optional[str] = None,
    role: Role = Role.CLIENT,
    status: AccountStatus = AccountStatus.ACTIVE,
) -> Profile:
    """
    Insert a new profile row.

    Raises:
        DuplicateRowError: a profile for this user_id already exists
        StoreError: any other store failure
    """

    now = to_iso_utc(utc_now())
    payload: dict[str, Any] = {
        "user_id": user_id,
        "email": email,
        "full_name": full_name,
        "phone": phone or None,
        "role": role.value,
        "client_status": status.value,
        "created_at": now,
        "updated_at": now,
    }

    response = execute(client.table(_PROFILES_TABLE).insert(payload), "insert profile")
    rows = rows_of(response)
    if not rows:
        # Insert returned no representation; read it back.
        profile = get_profile_by_user_id(client, user_id)
        if profile is None:
            raise RowNotFoundError(f"Inserted profile for {user_id} could not be read back")
        return profile
    return _row_to_profile(rows[0])


def _update_profile(client: Client, profile_id: str, changes: dict[str, Any], action: str) -> Profile:
    changes = {**changes, "updated_at": to_iso_utc(utc_now())}
    response = execute(
        client.table(_PROFILES_TABLE).update(changes).eq("id", profile_id),
        action,
    )
    rows = rows_of(response)
    if not rows:
        raise RowNotFoundError(f"Failed to {action}: no profile with id {profile_id}")
    return _row_to_profile(rows[0])


def reactivate_profile(
    client: Client,
    profile_id: str,
    full_name: str,
    phone: Optional[str] = None,
) -> Profile:
    """Move a deleted profile back to active with freshly submitted details."""

    return _update_profile(
        client,
        profile_id,
        {
            "client_status": AccountStatus.ACTIVE.value,
            "full_name": full_name,
            "phone": phone or None,
        },
        "reactivate profile",
    )


def update_profile_status(client: Client, profile_id: str, status: AccountStatus) -> Profile:
    return _update_profile(
        client,
        profile_id,
        {"client_status": status.value},
        "update profile status",
    )


def update_profile_role(client: Client, profile_id: str, role: Role) -> Profile:
    return _update_profile(client, profile_id, {"role": role.value}, "update profile role")


def list_client_profiles(client: Client, include_deleted: bool = False) -> List[Profile]:
    """List client profiles, newest first. Deleted clients are hidden by default."""

    query = client.table(_PROFILES_TABLE).select("*").eq("role", Role.CLIENT.value)
    if not include_deleted:
        query = query.neq("client_status", AccountStatus.DELETED.value)
    response = execute(query.order("created_at", desc=True), "list clients")
    return [_row_to_profile(row) for row in rows_of(response)]


def count_client_profiles(client: Client) -> int:
    response = execute(
        client.table(_PROFILES_TABLE)
        .select("id", count="exact")
        .eq("role", Role.CLIENT.value),
        "count clients",
    )
    count = getattr(response, "count", None)
    return int(count) if count is not None else len(rows_of(response))


__all__ = [
    "get_profile_by_user_id",
    "get_profile_by_id",
    "get_profile_by_email",
    "insert_profile",
    "reactivate_profile",
    "update_profile_status",
    "update_profile_role",
    "list_client_profiles",
    "count_client_profiles",
]

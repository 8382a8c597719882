"""
Request dependencies.

Every request gets its own Supabase client and SessionManager, so a user's
session never outlives or leaks out of the request that restored it.
Authenticated endpoints run a passive restore on each call: a client blocked
or deleted by an administrator is refused on their very next request.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Iterator, Optional

from fastapi import Depends, Header, HTTPException
from supabase import Client

from api.errors import account_flow_http_error
from domain.profile import Profile
from repositories.client import StoreSettings, create_store_client, load_settings
from services.auth_errors import AccountFlowError
from services.session_service import SessionManager


@lru_cache
def get_settings() -> StoreSettings:
    return load_settings()


def get_store_client(settings: StoreSettings = Depends(get_settings)) -> Client:
    return create_store_client(settings)


def get_session_manager(client: Client = Depends(get_store_client)) -> Iterator[SessionManager]:
    manager = SessionManager(client)
    try:
        yield manager
    finally:
        manager.close()


def bearer_token(authorization: Optional[str] = Header(default=None)) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=401, detail="Authorization header must be 'Bearer <token>'")
    return token.strip()


def get_current_profile(
    token: str = Depends(bearer_token),
    x_refresh_token: Optional[str] = Header(default=None),
    manager: SessionManager = Depends(get_session_manager),
) -> Profile:
    """Restore the caller's session and return their admitted profile."""

    try:
        profile = manager.restore(token, x_refresh_token or "")
    except AccountFlowError as exc:
        raise account_flow_http_error(exc) from exc

    if profile is None:
        raise HTTPException(status_code=401, detail="Session expired or invalid. Please sign in again.")
    return profile


def require_admin(profile: Profile = Depends(get_current_profile)) -> Profile:
    if not profile.is_admin():
        raise HTTPException(status_code=403, detail="Administrator access required")
    return profile

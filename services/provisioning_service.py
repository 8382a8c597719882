"""
Profile provisioning.

Makes sure a registered identity has exactly one consistent profile row.
Profile creation is an explicit step here; a database trigger that creates
profiles on sign-up is tolerated (its row is simply found) but not required.

Cases, in priority order:
1. New identity                         -> insert (duplicate key is benign)  -> CREATED
2. Existing identity, no profile        -> self-heal insert                   -> CREATED
3. Existing identity, profile deleted   -> reactivate with new name/phone     -> REACTIVATED
4. Existing identity, profile not deleted                                      -> AlreadyExists

The registration flow always leaves the provider signed out, so a new
session is only ever established through SessionManager.sign_in.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from supabase import Client

from domain.profile import Profile, RegistrationFields
from domain.session import Identity
from repositories.client import StoreSettings
from repositories.errors import DuplicateRowError, StoreError
from repositories.profile_repository import (
    get_profile_by_user_id,
    insert_profile,
    reactivate_profile,
)
from services.auth_errors import AlreadyExists, CredentialRejected, ProvisioningFailed
from services.auth_provider import AuthProvider, ProviderError, SupabaseAuthProvider

logger = logging.getLogger(__name__)


class ProvisioningOutcome(str, Enum):
    CREATED = "created"
    REACTIVATED = "reactivated"


@dataclass(frozen=True, slots=True)
class ProvisioningResult:
    outcome: ProvisioningOutcome
    profile: Profile


@dataclass(frozen=True, slots=True)
class ProvisioningPolicy:
    """
    grace_seconds: how long to wait for a sign-up trigger before inserting
    insert_attempts: attempts for an insert that fails with a transient store error
    """

    grace_seconds: float = 0.0
    insert_attempts: int = 2

    @classmethod
    def from_settings(cls, settings: StoreSettings) -> "ProvisioningPolicy":
        return cls(
            grace_seconds=settings.profile_grace_seconds,
            insert_attempts=settings.profile_insert_attempts,
        )


def _fetch_profile(client: Client, identity: Identity) -> Optional[Profile]:
    try:
        return get_profile_by_user_id(client, identity.user_id)
    except StoreError as exc:
        logger.error(
            "Profile fetch failed during provisioning",
            extra={"user_id": identity.user_id, "store_code": exc.code, "error": str(exc)},
        )
        raise ProvisioningFailed() from exc


def _insert_with_retry(
    client: Client,
    identity: Identity,
    fields: RegistrationFields,
    attempts: int,
) -> Profile:
    """
    Insert the profile, retrying transient failures.

    DuplicateRowError is never retried; callers decide what a conflict means.
    """

    last_error: Optional[StoreError] = None
    for attempt in range(1, max(1, attempts) + 1):
        try:
            return insert_profile(
                client,
                user_id=identity.user_id,
                email=fields.email,
                full_name=fields.full_name,
                phone=fields.phone,
            )
        except DuplicateRowError:
            raise
        except StoreError as exc:
            last_error = exc
            logger.warning(
                "Profile insert failed",
                extra={"user_id": identity.user_id, "attempt": attempt, "store_code": exc.code},
            )

    logger.error(
        "Profile insert gave up",
        extra={"user_id": identity.user_id, "error": str(last_error)},
    )
    raise ProvisioningFailed() from last_error


def ensure_profile(
    client: Client,
    identity: Identity,
    fields: RegistrationFields,
    *,
    existing_identity: bool,
    policy: ProvisioningPolicy = ProvisioningPolicy(),
) -> ProvisioningResult:
    """
    Reconcile a profile row with an identity.

    Args:
        client: Store client (signed in as the identity, or holding a server-side key)
        identity: The provider identity being registered
        fields: Submitted registration fields
        existing_identity: True when the provider already knew this email
        policy: Trigger grace period and insert retry policy

    Returns:
        ProvisioningResult with outcome CREATED or REACTIVATED

    Raises:
        AlreadyExists: the identity already has a usable profile
        ProvisioningFailed: unexpected store failure
    """

    if not existing_identity:
        if policy.grace_seconds > 0:
            time.sleep(policy.grace_seconds)
            profile = _fetch_profile(client, identity)
            if profile is not None:
                return ProvisioningResult(ProvisioningOutcome.CREATED, profile)

        try:
            profile = _insert_with_retry(client, identity, fields, policy.insert_attempts)
        except DuplicateRowError:
            # A trigger or a concurrent registration got there first.
            logger.info("Profile already provisioned", extra={"user_id": identity.user_id})
            profile = _fetch_profile(client, identity)
            if profile is None:
                raise ProvisioningFailed()
        return ProvisioningResult(ProvisioningOutcome.CREATED, profile)

    profile = _fetch_profile(client, identity)

    if profile is None:
        logger.info("Re-creating missing profile", extra={"user_id": identity.user_id})
        try:
            profile = _insert_with_retry(client, identity, fields, policy.insert_attempts)
        except DuplicateRowError as exc:
            raise AlreadyExists() from exc
        return ProvisioningResult(ProvisioningOutcome.CREATED, profile)

    if profile.is_deleted():
        try:
            profile = reactivate_profile(
                client,
                profile.profile_id,
                full_name=fields.full_name,
                phone=fields.phone,
            )
        except StoreError as exc:
            logger.error(
                "Profile reactivation failed",
                extra={"user_id": identity.user_id, "store_code": exc.code, "error": str(exc)},
            )
            raise ProvisioningFailed() from exc
        return ProvisioningResult(ProvisioningOutcome.REACTIVATED, profile)

    raise AlreadyExists()


def register_account(
    client: Client,
    email: str,
    password: str,
    full_name: str,
    phone: Optional[str] = None,
    *,
    provider: Optional[AuthProvider] = None,
    policy: ProvisioningPolicy = ProvisioningPolicy(),
) -> ProvisioningResult:
    """
    Registration flow: sign up at the provider, then provision the profile.

    An email the provider already knows is resolved by signing in with the
    submitted password, which proves ownership before any reactivation.

    Raises:
        ValueError: submitted fields are invalid
        CredentialRejected: the provider refused the submitted credentials
        AlreadyExists / ProvisioningFailed: see ensure_profile
    """

    fields = RegistrationFields(email=email, full_name=full_name, phone=phone or None)
    provider = provider or SupabaseAuthProvider(client)

    logger.info("Registration attempt", extra={"email": email})

    try:
        signup = provider.sign_up(email, password, {"full_name": full_name, "phone": phone})
    except ProviderError as exc:
        if exc.status is not None and 400 <= exc.status < 500:
            logger.info(
                "Sign up rejected by provider",
                extra={"email": email, "provider_code": exc.code},
            )
            raise CredentialRejected(exc.message) from exc
        logger.error(
            "Sign up failed",
            extra={"email": email, "provider_code": exc.code, "error": exc.message},
        )
        raise ProvisioningFailed() from exc

    try:
        if signup.already_registered or signup.identity is None:
            try:
                session = provider.sign_in(email, password)
            except ProviderError as exc:
                raise AlreadyExists() from exc
            result = ensure_profile(
                client, session.identity, fields, existing_identity=True, policy=policy
            )
        else:
            result = ensure_profile(
                client, signup.identity, fields, existing_identity=False, policy=policy
            )
    except AlreadyExists:
        logger.info("Registration collided with an existing account", extra={"email": email})
        raise
    finally:
        _leave_signed_out(provider)

    logger.info(
        "Registration provisioned",
        extra={"user_id": result.profile.user_id, "outcome": result.outcome.value},
    )
    return result


def _leave_signed_out(provider: AuthProvider) -> None:
    try:
        provider.sign_out()
    except ProviderError as exc:
        logger.warning(
            "Sign out after registration failed",
            extra={"provider_code": exc.code, "error": exc.message},
        )


__all__ = [
    "ProvisioningOutcome",
    "ProvisioningResult",
    "ProvisioningPolicy",
    "ensure_profile",
    "register_account",
]

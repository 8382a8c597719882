"""
Tests for `services/provisioning_service.py`.

Covers contract rules:
- Exactly one profile per identity, however often or concurrently
  registration runs for it.
- A deleted profile is reactivated by registering again, and the account can
  then sign in.
- A live account is never reactivated or duplicated: AlreadyExists.
- Registration always leaves the provider signed out.
"""

from __future__ import annotations

import httpx
import pytest
from supabase_auth.errors import AuthApiError

from domain.profile import AccountStatus, RegistrationFields, Role
from domain.session import Identity
from services.auth_errors import AlreadyExists, CredentialRejected, ProvisioningFailed
from services.provisioning_service import (
    ProvisioningOutcome,
    ProvisioningPolicy,
    ensure_profile,
    register_account,
)

PASSWORD = "secret-pass"


def _register(store, email="new@example.com", password=PASSWORD, full_name="Nora New", phone=None, **kwargs):
    return register_account(store, email=email, password=password, full_name=full_name, phone=phone, **kwargs)


def test_new_registration_creates_active_client_profile(store) -> None:
    result = _register(store, phone="+1 555 0100")

    assert result.outcome is ProvisioningOutcome.CREATED
    assert result.profile.role is Role.CLIENT
    assert result.profile.status is AccountStatus.ACTIVE
    assert result.profile.phone == "+1 555 0100"
    assert len(store.profiles_for(result.profile.user_id)) == 1
    assert store.auth.current is None


def test_registering_twice_creates_then_reports_already_exists(store) -> None:
    first = _register(store)

    with pytest.raises(AlreadyExists):
        _register(store)

    assert first.outcome is ProvisioningOutcome.CREATED
    assert len(store.tables["profiles"]) == 1
    assert store.auth.current is None


def test_existing_email_with_wrong_password_is_already_exists(store) -> None:
    store.register_user("taken@example.com", PASSWORD)

    with pytest.raises(AlreadyExists):
        _register(store, email="taken@example.com", password="another-pass")


def test_hidden_existing_identity_is_resolved_by_sign_in(store) -> None:
    store.auth.hide_existing_users = True
    user, _ = store.register_user("taken@example.com", PASSWORD, status="deleted")

    result = _register(store, email="taken@example.com", full_name="Back Again")

    assert result.outcome is ProvisioningOutcome.REACTIVATED
    assert result.profile.user_id == user.id


def test_deleted_profile_is_reactivated_and_can_sign_in(store, manager) -> None:
    user, row = store.register_user("gone@example.com", PASSWORD, status="deleted")

    result = _register(store, email="gone@example.com", full_name="Returned Name", phone="+1 555 0199")

    assert result.outcome is ProvisioningOutcome.REACTIVATED
    assert result.profile.profile_id == row["id"]
    assert result.profile.status is AccountStatus.ACTIVE
    assert result.profile.full_name == "Returned Name"
    assert result.profile.phone == "+1 555 0199"
    assert len(store.profiles_for(user.id)) == 1

    profile = manager.sign_in("gone@example.com", PASSWORD)
    assert profile.status is AccountStatus.ACTIVE


def test_blocked_profile_is_not_reactivated(store) -> None:
    user, _ = store.register_user("blocked@example.com", PASSWORD, status="blocked")

    with pytest.raises(AlreadyExists):
        _register(store, email="blocked@example.com")

    assert store.profiles_for(user.id)[0]["client_status"] == "blocked"


def test_missing_profile_for_existing_identity_is_recreated(store) -> None:
    user, _ = store.register_user("orphan@example.com", PASSWORD, with_profile=False)

    result = _register(store, email="orphan@example.com", full_name="Orphan Fixed")

    assert result.outcome is ProvisioningOutcome.CREATED
    assert result.profile.user_id == user.id
    assert len(store.profiles_for(user.id)) == 1


def test_concurrent_insert_for_new_identity_is_benign(store) -> None:
    def _trigger_wins(row):
        # Another writer (sign-up trigger, second tab) lands first.
        if not store.profiles_for(row["user_id"]):
            store.seed_profile(row["user_id"], row["email"], full_name=row["full_name"])

    store.before_insert["profiles"] = _trigger_wins

    result = _register(store)

    assert result.outcome is ProvisioningOutcome.CREATED
    assert len(store.profiles_for(result.profile.user_id)) == 1


def test_concurrent_self_heal_reports_already_exists(store) -> None:
    user, _ = store.register_user("orphan@example.com", PASSWORD, with_profile=False)
    store.before_insert["profiles"] = lambda row: store.seed_profile(row["user_id"], row["email"])
    fields = RegistrationFields(email="orphan@example.com", full_name="Orphan")

    with pytest.raises(AlreadyExists):
        ensure_profile(store, Identity(user.id, user.email), fields, existing_identity=True)

    assert len(store.profiles_for(user.id)) == 1


def test_grace_period_picks_up_trigger_created_profile(store, monkeypatch) -> None:
    identity = Identity("trigger-user", "trig@example.com")
    fields = RegistrationFields(email="trig@example.com", full_name="Trig")
    monkeypatch.setattr(
        "services.provisioning_service.time.sleep",
        lambda seconds: store.seed_profile(identity.user_id, identity.email),
    )

    def _no_insert(row):
        raise AssertionError("insert must not run when the trigger already created the profile")

    store.before_insert["profiles"] = _no_insert

    result = ensure_profile(
        store, identity, fields, existing_identity=False, policy=ProvisioningPolicy(grace_seconds=0.5)
    )

    assert result.outcome is ProvisioningOutcome.CREATED
    assert len(store.profiles_for(identity.user_id)) == 1


def test_transient_insert_failure_is_retried(store) -> None:
    store.fail("profiles", "insert", times=1)

    result = _register(store, policy=ProvisioningPolicy(insert_attempts=2))

    assert result.outcome is ProvisioningOutcome.CREATED
    assert len(store.tables["profiles"]) == 1


def test_persistent_insert_failure_is_provisioning_failed(store) -> None:
    store.fail("profiles", "insert")

    with pytest.raises(ProvisioningFailed) as excinfo:
        _register(store, policy=ProvisioningPolicy(insert_attempts=3))

    assert "connection failure" not in excinfo.value.user_message
    assert store.auth.current is None


def test_sign_up_rejection_is_credential_rejected(store) -> None:
    store.auth.sign_up_error = AuthApiError("Password should be at least 6 characters.", 422, "weak_password")

    with pytest.raises(CredentialRejected) as excinfo:
        _register(store)

    assert excinfo.value.user_message == "Password should be at least 6 characters."
    assert store.tables["profiles"] == []


def test_sign_up_server_failure_is_provisioning_failed(store) -> None:
    store.auth.sign_up_error = AuthApiError("Database error saving new user", 500, "unexpected_failure")

    with pytest.raises(ProvisioningFailed):
        _register(store)


def test_sign_up_connection_error_is_provisioning_failed(store) -> None:
    store.auth.sign_up_error = httpx.ConnectError("connection refused")

    with pytest.raises(ProvisioningFailed):
        _register(store)

    assert store.tables["profiles"] == []


def test_invalid_fields_are_rejected_before_sign_up(store) -> None:
    with pytest.raises(ValueError):
        _register(store, email="nope")

    assert store.auth.users == {}

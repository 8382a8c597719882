"""
Account flow errors.

Every failure of sign-in, session restore or registration reaches the
presentation layer as one of these. Each carries a stable `kind` and a
message that is safe to show an end user; provider and store payloads are
logged by the services and never put into `user_message` (the one exception
is CredentialRejected, which surfaces the provider's own rejection text).
"""

from __future__ import annotations

from domain.status_guard import DenialReason


class AccountFlowError(Exception):
    kind: str = "account_flow_error"
    user_message: str = "Something went wrong. Please try again."
    retryable: bool = False

    def __init__(self, user_message: str | None = None) -> None:
        if user_message is not None:
            self.user_message = user_message
        super().__init__(self.user_message)


class CredentialRejected(AccountFlowError):
    """Bad password or unknown email. The user may retry."""

    kind = "credential_rejected"
    user_message = "Invalid email or password."
    retryable = True


class AccountDenied(AccountFlowError):
    """Credentials were valid but the account may not hold a session."""

    kind = "account_denied"
    reason: DenialReason


class AccountBlocked(AccountDenied):
    kind = "account_blocked"
    user_message = "Your account has been blocked. Please contact support."
    reason = DenialReason.BLOCKED


class AccountDeleted(AccountDenied):
    kind = "account_deleted"
    user_message = "Your account has been removed. Please contact support if this is an error."
    reason = DenialReason.DELETED


class AccountMissing(AccountDenied):
    kind = "account_missing"
    user_message = "No account profile exists for these credentials. Please contact support."
    reason = DenialReason.NOT_FOUND


class AlreadyExists(AccountFlowError):
    """Registration collided with an existing account; sign in instead."""

    kind = "already_exists"
    user_message = "An account with this email already exists. Please sign in instead."


class ProvisioningFailed(AccountFlowError):
    kind = "provisioning_failed"
    user_message = "We could not complete your registration. Please try again later."


class ProfileLookupFailed(AccountFlowError):
    kind = "profile_lookup_failed"
    user_message = "We could not verify your account right now. Please sign in again later."


_DENIALS: dict[DenialReason, type[AccountDenied]] = {
    DenialReason.BLOCKED: AccountBlocked,
    DenialReason.DELETED: AccountDeleted,
    DenialReason.NOT_FOUND: AccountMissing,
}


def denial_error(reason: DenialReason) -> AccountDenied:
    return _DENIALS[reason]()


__all__ = [
    "AccountFlowError",
    "CredentialRejected",
    "AccountDenied",
    "AccountBlocked",
    "AccountDeleted",
    "AccountMissing",
    "AlreadyExists",
    "ProvisioningFailed",
    "ProfileLookupFailed",
    "denial_error",
]

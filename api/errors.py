"""
Translation of service errors into HTTP errors.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException

from repositories.errors import StoreError
from services.auth_errors import (
    AccountDenied,
    AccountFlowError,
    AlreadyExists,
    CredentialRejected,
    ProfileLookupFailed,
)

logger = logging.getLogger(__name__)


def _status_for(exc: AccountFlowError) -> int:
    if isinstance(exc, CredentialRejected):
        return 401
    if isinstance(exc, AccountDenied):
        return 403
    if isinstance(exc, AlreadyExists):
        return 409
    if isinstance(exc, ProfileLookupFailed):
        return 503
    return 500


def account_flow_http_error(exc: AccountFlowError) -> HTTPException:
    """HTTP error carrying only the user-facing message and the error kind."""

    return HTTPException(
        status_code=_status_for(exc),
        detail={"error": exc.kind, "message": exc.user_message},
    )


def store_http_error(exc: StoreError, action: str) -> HTTPException:
    logger.error(f"Store failure while trying to {action}", extra={"store_code": exc.code, "error": str(exc)})
    return HTTPException(status_code=500, detail=f"Failed to {action}")

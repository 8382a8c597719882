"""
Auth API Endpoints.

Sign-in, registration, sign-out and session restore. All of them run
through SessionManager / register_account so the status guard applies to
every way of obtaining or keeping a session.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from supabase import Client

from api.dependencies import (
    bearer_token,
    get_session_manager,
    get_settings,
    get_store_client,
)
from api.errors import account_flow_http_error
from api.models import (
    ProfileResponse,
    RegisterRequest,
    RegisterResponse,
    SessionResponse,
    SignInRequest,
    SignOutResponse,
)
from repositories.client import StoreSettings
from services.auth_errors import AccountFlowError
from services.provisioning_service import (
    ProvisioningOutcome,
    ProvisioningPolicy,
    register_account,
)
from services.session_service import SessionManager

logger = logging.getLogger(__name__)

router = APIRouter()


def _session_response(manager: SessionManager) -> SessionResponse:
    state = manager.state
    if not state.is_signed_in or state.session is None or state.profile is None:
        raise HTTPException(status_code=401, detail="Not signed in")
    return SessionResponse(
        access_token=state.session.access_token,
        refresh_token=state.session.refresh_token,
        expires_at=state.session.expires_at,
        profile=ProfileResponse.from_domain(state.profile),
    )


@router.post(
    "/auth/sign-in",
    response_model=SessionResponse,
    summary="Sign In",
    description="Check credentials, then admit the account through the status guard."
)
def sign_in(request: SignInRequest, manager: SessionManager = Depends(get_session_manager)):
    """
    Sign in with email and password.

    **Errors:**
    - 401 `credential_rejected`: wrong email or password
    - 403 `account_blocked` / `account_deleted` / `account_missing`: the
      credentials are valid but the account may not sign in; the provider
      session has already been terminated
    """
    try:
        manager.sign_in(request.email, request.password)
    except AccountFlowError as exc:
        raise account_flow_http_error(exc) from exc

    return _session_response(manager)


@router.post(
    "/auth/register",
    response_model=RegisterResponse,
    status_code=201,
    summary="Register",
    description="Create an account (or reactivate a deleted one). Sign in afterwards."
)
def register(
    request: RegisterRequest,
    client: Client = Depends(get_store_client),
    settings: StoreSettings = Depends(get_settings),
):
    """
    Register a client account.

    **Outcomes:**
    - `created`: a new profile was provisioned
    - `reactivated`: a previously deleted account was restored with the new name/phone

    **Errors:**
    - 409 `already_exists`: the email already has an account; sign in instead
    - 401 `credential_rejected`: the provider refused the submitted credentials
    - 500 `provisioning_failed`
    """
    try:
        result = register_account(
            client,
            email=request.email,
            password=request.password,
            full_name=request.full_name,
            phone=request.phone,
            policy=ProvisioningPolicy.from_settings(settings),
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except AccountFlowError as exc:
        raise account_flow_http_error(exc) from exc

    if result.outcome is ProvisioningOutcome.REACTIVATED:
        message = "Your account has been reactivated. Please sign in."
    else:
        message = "Account created. Please sign in."

    return RegisterResponse(
        outcome=result.outcome.value,
        profile=ProfileResponse.from_domain(result.profile),
        message=message,
    )


@router.post(
    "/auth/sign-out",
    response_model=SignOutResponse,
    summary="Sign Out",
    description="End the session. Always succeeds for the caller."
)
def sign_out(
    token: str = Depends(bearer_token),
    x_refresh_token: Optional[str] = Header(default=None),
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Sign out.

    The session is first restored so the provider can revoke it. A failure
    of the remote revocation is logged; the response still reports the
    caller as signed out.
    """
    try:
        manager.restore(token, x_refresh_token or "")
    except AccountFlowError as exc:
        # Denials already terminated the provider session.
        logger.info("Sign out of a denied session", extra={"kind": exc.kind})

    remote_error = manager.sign_out()
    message = "Signed out."
    if remote_error is not None:
        message = "Signed out locally. The server session will expire on its own."

    return SignOutResponse(signed_out=True, message=message)


@router.get(
    "/auth/session",
    response_model=SessionResponse,
    summary="Restore Session",
    description="Re-admit a bearer session through the status guard."
)
def restore_session(
    token: str = Depends(bearer_token),
    x_refresh_token: Optional[str] = Header(default=None),
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Passive session restore.

    Send `Authorization: Bearer <access_token>` and, to allow refreshing an
    expired token, `X-Refresh-Token: <refresh_token>`.
    """
    try:
        profile = manager.restore(token, x_refresh_token or "")
    except AccountFlowError as exc:
        raise account_flow_http_error(exc) from exc

    if profile is None:
        raise HTTPException(status_code=401, detail="Session expired or invalid. Please sign in again.")

    return _session_response(manager)

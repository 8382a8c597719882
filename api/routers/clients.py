"""
Client Management API Endpoints (administrators only).
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from supabase import Client

from api.dependencies import get_store_client, require_admin
from api.errors import store_http_error
from api.models import ClientStatusUpdateRequest, ProfileResponse
from repositories.errors import StoreError
from services.admin_service import (
    ClientManagementError,
    ClientNotFoundError,
    change_client_status,
    delete_client,
    list_clients,
)

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get(
    "/admin/clients",
    response_model=List[ProfileResponse],
    summary="List Clients",
    description="Client accounts that have not been deleted, newest first."
)
def clients(client: Client = Depends(get_store_client)):
    try:
        profiles = list_clients(client)
    except StoreError as exc:
        raise store_http_error(exc, "load clients") from exc
    return [ProfileResponse.from_domain(profile) for profile in profiles]


@router.patch(
    "/admin/clients/{profile_id}/status",
    response_model=ProfileResponse,
    summary="Change Client Status",
    description="Set a client to active, inactive or blocked. Takes effect on the client's next request."
)
def update_client_status(
    profile_id: str,
    request: ClientStatusUpdateRequest,
    client: Client = Depends(get_store_client),
):
    try:
        profile = change_client_status(client, profile_id, request.status)
    except ClientNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ClientManagementError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except StoreError as exc:
        raise store_http_error(exc, "update client status") from exc
    return ProfileResponse.from_domain(profile)


@router.delete(
    "/admin/clients/{profile_id}",
    response_model=ProfileResponse,
    summary="Delete Client",
    description="Soft delete: the account is marked deleted and can no longer sign in."
)
def remove_client(profile_id: str, client: Client = Depends(get_store_client)):
    try:
        profile = delete_client(client, profile_id)
    except ClientNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ClientManagementError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except StoreError as exc:
        raise store_http_error(exc, "delete client") from exc
    return ProfileResponse.from_domain(profile)

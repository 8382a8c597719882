"""
Dashboard API Endpoints.
"""

from fastapi import APIRouter, Depends
from supabase import Client

from api.dependencies import get_current_profile, get_store_client, require_admin
from api.errors import store_http_error
from api.models import AdminDashboardResponse, ClientDashboardResponse
from domain.profile import Profile
from repositories.errors import StoreError
from services.admin_service import admin_dashboard_stats
from services.portal_service import client_dashboard_stats

router = APIRouter()


@router.get(
    "/dashboard",
    response_model=ClientDashboardResponse,
    summary="Client Dashboard",
)
def client_dashboard(
    profile: Profile = Depends(get_current_profile),
    client: Client = Depends(get_store_client),
):
    try:
        stats = client_dashboard_stats(client, profile)
    except StoreError as exc:
        raise store_http_error(exc, "load dashboard") from exc
    return ClientDashboardResponse(
        total_orders=stats.total_orders,
        pending_orders=stats.pending_orders,
        completed_orders=stats.completed_orders,
        total_documents=stats.total_documents,
    )


@router.get(
    "/admin/dashboard",
    response_model=AdminDashboardResponse,
    summary="Admin Dashboard",
    description="Totals; an aggregate that fails to load is reported as 0.",
    dependencies=[Depends(require_admin)],
)
def admin_dashboard(client: Client = Depends(get_store_client)):
    stats = admin_dashboard_stats(client)
    return AdminDashboardResponse(
        total_orders=stats.total_orders,
        total_clients=stats.total_clients,
        total_products=stats.total_products,
        total_revenue=stats.total_revenue,
    )

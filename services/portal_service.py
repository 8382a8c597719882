"""
Client portal service: the signed-in client's dashboard figures.
"""

from __future__ import annotations

from dataclasses import dataclass

from supabase import Client

from domain.order import OPEN_ORDER_STATUSES, OrderStatus
from domain.profile import Profile
from repositories.document_repository import count_public_documents
from repositories.order_repository import list_order_statuses_for_client


@dataclass(frozen=True, slots=True)
class ClientDashboardStats:
    total_orders: int
    pending_orders: int
    completed_orders: int
    total_documents: int


def client_dashboard_stats(client: Client, profile: Profile) -> ClientDashboardStats:
    """
    Order counts for one client plus the number of documents shared with clients.

    Pending covers pending/confirmed/processing; completed means delivered.
    """

    statuses = list_order_statuses_for_client(client, profile.profile_id)

    return ClientDashboardStats(
        total_orders=len(statuses),
        pending_orders=sum(1 for status in statuses if status in OPEN_ORDER_STATUSES),
        completed_orders=sum(1 for status in statuses if status is OrderStatus.DELIVERED),
        total_documents=count_public_documents(client),
    )


__all__ = ["ClientDashboardStats", "client_dashboard_stats"]

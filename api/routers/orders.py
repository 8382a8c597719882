"""
Orders API Endpoints.

Clients read their own orders; administrators read all orders and update
order/payment status.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from supabase import Client

from api.dependencies import get_current_profile, get_store_client, require_admin
from api.errors import store_http_error
from api.models import OrderResponse, OrderStatusUpdateRequest
from domain.profile import Profile
from repositories.errors import RowNotFoundError, StoreError
from repositories.order_repository import (
    list_all_orders,
    list_orders_for_client,
    update_order_status,
)

router = APIRouter()


@router.get(
    "/orders",
    response_model=List[OrderResponse],
    summary="My Orders",
    description="The signed-in client's orders with line items, newest first."
)
def my_orders(
    profile: Profile = Depends(get_current_profile),
    client: Client = Depends(get_store_client),
):
    try:
        orders = list_orders_for_client(client, profile.profile_id)
    except StoreError as exc:
        raise store_http_error(exc, "load orders") from exc
    return [OrderResponse.from_domain(order) for order in orders]


@router.get(
    "/admin/orders",
    response_model=List[OrderResponse],
    summary="All Orders",
    dependencies=[Depends(require_admin)],
)
def all_orders(client: Client = Depends(get_store_client)):
    try:
        orders = list_all_orders(client)
    except StoreError as exc:
        raise store_http_error(exc, "load orders") from exc
    return [OrderResponse.from_domain(order) for order in orders]


@router.patch(
    "/admin/orders/{order_id}/status",
    response_model=OrderResponse,
    summary="Update Order Status",
    dependencies=[Depends(require_admin)],
)
def change_order_status(
    order_id: str,
    request: OrderStatusUpdateRequest,
    client: Client = Depends(get_store_client),
):
    if request.order_status is None and request.payment_status is None:
        raise HTTPException(status_code=422, detail="Provide order_status and/or payment_status")

    try:
        order = update_order_status(
            client,
            order_id,
            order_status=request.order_status,
            payment_status=request.payment_status,
        )
    except RowNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"Order not found: {order_id}") from exc
    except StoreError as exc:
        raise store_http_error(exc, "update order status") from exc
    return OrderResponse.from_domain(order)

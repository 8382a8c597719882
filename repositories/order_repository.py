"""
Order repository (persistence).

Reads orders with their embedded line items and product details, and
updates order/payment status. Orders are never created or deleted here.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, List, Mapping, Optional

from supabase import Client

from domain.order import Order, OrderItem, OrderStatus, PaymentStatus
from domain.time import parse_optional_timestamp, to_iso_utc, utc_now
from repositories.client import execute, rows_of
from repositories.errors import RowNotFoundError

_ORDERS_TABLE: str = "orders"

# PostgREST embedded-resource select: order -> order_items -> products.
_ORDER_WITH_ITEMS = """
    *,
    order_items (
        id,
        product_id,
        quantity,
        unit_price,
        total_price,
        products (
            name,
            image_url
        )
    )
"""


def _optional_decimal(value: Any) -> Optional[Decimal]:
    return Decimal(str(value)) if value is not None else None


def _row_to_item(row: Mapping[str, Any]) -> OrderItem:
    product = row.get("products") or {}
    return OrderItem(
        item_id=str(row["id"]),
        product_id=str(row["product_id"]) if row.get("product_id") else None,
        quantity=int(row.get("quantity") or 1),
        unit_price=Decimal(str(row.get("unit_price", "0"))),
        total_price=_optional_decimal(row.get("total_price")),
        product_name=product.get("name"),
        product_image_url=product.get("image_url"),
    )


def _row_to_order(row: Mapping[str, Any]) -> Order:
    return Order(
        order_id=str(row["id"]),
        client_id=str(row["client_id"]),
        total_amount=Decimal(str(row.get("total_amount", "0"))),
        currency=str(row.get("currency") or "USD"),
        order_status=OrderStatus(str(row.get("order_status") or OrderStatus.PENDING.value)),
        payment_status=PaymentStatus(str(row.get("payment_status") or PaymentStatus.PENDING.value)),
        delivery_address=row.get("delivery_address"),
        items=[_row_to_item(item) for item in row.get("order_items") or []],
        created_at=parse_optional_timestamp(row.get("created_at")),
        updated_at=parse_optional_timestamp(row.get("updated_at")),
    )


def list_orders_for_client(client: Client, profile_id: str) -> List[Order]:
    """List one client's orders (by profile id) newest first, with line items."""

    response = execute(
        client.table(_ORDERS_TABLE)
        .select(_ORDER_WITH_ITEMS)
        .eq("client_id", profile_id)
        .order("created_at", desc=True),
        "list client orders",
    )
    return [_row_to_order(row) for row in rows_of(response)]


def list_all_orders(client: Client) -> List[Order]:
    response = execute(
        client.table(_ORDERS_TABLE).select(_ORDER_WITH_ITEMS).order("created_at", desc=True),
        "list orders",
    )
    return [_row_to_order(row) for row in rows_of(response)]


def list_order_statuses_for_client(client: Client, profile_id: str) -> List[OrderStatus]:
    response = execute(
        client.table(_ORDERS_TABLE).select("order_status").eq("client_id", profile_id),
        "list client order statuses",
    )
    return [OrderStatus(str(row["order_status"])) for row in rows_of(response)]


def update_order_status(
    client: Client,
    order_id: str,
    order_status: Optional[OrderStatus] = None,
    payment_status: Optional[PaymentStatus] = None,
) -> Order:
    changes: dict[str, Any] = {"updated_at": to_iso_utc(utc_now())}
    if order_status is not None:
        changes["order_status"] = order_status.value
    if payment_status is not None:
        changes["payment_status"] = payment_status.value

    response = execute(
        client.table(_ORDERS_TABLE).update(changes).eq("id", order_id),
        "update order status",
    )
    rows = rows_of(response)
    if not rows:
        raise RowNotFoundError(f"Failed to update order status: no order with id {order_id}")
    return _row_to_order(rows[0])


def count_orders(client: Client) -> int:
    response = execute(
        client.table(_ORDERS_TABLE).select("id", count="exact"),
        "count orders",
    )
    count = getattr(response, "count", None)
    return int(count) if count is not None else len(rows_of(response))


def paid_order_amounts(client: Client) -> List[Decimal]:
    response = execute(
        client.table(_ORDERS_TABLE)
        .select("total_amount")
        .eq("payment_status", PaymentStatus.PAID.value),
        "list paid order amounts",
    )
    return [Decimal(str(row.get("total_amount") or "0")) for row in rows_of(response)]


__all__ = [
    "list_orders_for_client",
    "list_all_orders",
    "list_order_statuses_for_client",
    "update_order_status",
    "count_orders",
    "paid_order_amounts",
]

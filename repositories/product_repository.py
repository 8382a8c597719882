"""
Product repository (persistence).

CRUD for the `products` table. Field validation lives in the domain layer
(`validate_product_fields`); this module only maps rows.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, List, Mapping, Optional

from supabase import Client

from domain.product import Product
from domain.time import parse_optional_timestamp, to_iso_utc, utc_now
from repositories.client import execute, rows_of
from repositories.errors import RowNotFoundError

_PRODUCTS_TABLE: str = "products"


def _row_to_product(row: Mapping[str, Any]) -> Product:
    return Product(
        product_id=str(row["id"]),
        name=str(row["name"]),
        description=row.get("description"),
        price=Decimal(str(row.get("price", "0"))),
        currency=str(row.get("currency") or "USD"),
        image_url=row.get("image_url"),
        stock_quantity=int(row.get("stock_quantity") or 0),
        is_active=bool(row.get("is_active", True)),
        created_at=parse_optional_timestamp(row.get("created_at")),
        updated_at=parse_optional_timestamp(row.get("updated_at")),
    )


def _serialize(fields: Mapping[str, Any]) -> dict[str, Any]:
    # PostgREST takes numerics as JSON numbers; Decimal is not JSON serializable.
    payload = dict(fields)
    if isinstance(payload.get("price"), Decimal):
        payload["price"] = float(payload["price"])
    return payload


def list_products(client: Client, active_only: bool = True) -> List[Product]:
    """List products newest first. The public catalog only shows active ones."""

    query = client.table(_PRODUCTS_TABLE).select("*")
    if active_only:
        query = query.eq("is_active", True)
    response = execute(query.order("created_at", desc=True), "list products")
    return [_row_to_product(row) for row in rows_of(response)]


def get_product(client: Client, product_id: str) -> Optional[Product]:
    response = execute(
        client.table(_PRODUCTS_TABLE).select("*").eq("id", product_id).limit(1),
        "fetch product",
    )
    rows = rows_of(response)
    return _row_to_product(rows[0]) if rows else None


def create_product(client: Client, fields: Mapping[str, Any]) -> Product:
    now = to_iso_utc(utc_now())
    payload = {**_serialize(fields), "created_at": now, "updated_at": now}
    response = execute(client.table(_PRODUCTS_TABLE).insert(payload), "create product")
    rows = rows_of(response)
    if not rows:
        raise RowNotFoundError("Failed to create product: no row returned")
    return _row_to_product(rows[0])


def update_product(client: Client, product_id: str, changes: Mapping[str, Any]) -> Product:
    payload = {**_serialize(changes), "updated_at": to_iso_utc(utc_now())}
    response = execute(
        client.table(_PRODUCTS_TABLE).update(payload).eq("id", product_id),
        "update product",
    )
    rows = rows_of(response)
    if not rows:
        raise RowNotFoundError(f"Failed to update product: no product with id {product_id}")
    return _row_to_product(rows[0])


def delete_product(client: Client, product_id: str) -> None:
    response = execute(
        client.table(_PRODUCTS_TABLE).delete().eq("id", product_id),
        "delete product",
    )
    if not rows_of(response):
        raise RowNotFoundError(f"Failed to delete product: no product with id {product_id}")


def count_products(client: Client) -> int:
    response = execute(
        client.table(_PRODUCTS_TABLE).select("id", count="exact"),
        "count products",
    )
    count = getattr(response, "count", None)
    return int(count) if count is not None else len(rows_of(response))


__all__ = [
    "list_products",
    "get_product",
    "create_product",
    "update_product",
    "delete_product",
    "count_products",
]

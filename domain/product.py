"""
Domain: Catalog products.

Products are listed publicly while `is_active` is true. Stock quantity is
informational only; no reservation or concurrency control is performed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from .time import require_utc_timestamp


class ProductValidationError(ValueError):
    """Raised when submitted product fields violate catalog rules."""


@dataclass(frozen=True, slots=True)
class Product:
    product_id: str
    name: str
    price: Decimal
    currency: str = "USD"
    description: Optional[str] = None
    image_url: Optional[str] = None
    stock_quantity: int = 0
    is_active: bool = True

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
        if self.updated_at is not None:
            require_utc_timestamp("updated_at", self.updated_at)


def validate_product_fields(
    *,
    name: Optional[str] = None,
    price: Optional[Decimal] = None,
    currency: Optional[str] = None,
    stock_quantity: Optional[int] = None,
) -> None:
    """
    Validate the subset of product fields that was supplied.

    Fields left as None are not checked, so the same rules apply to both
    creation (all required fields present) and partial updates.
    """

    if name is not None and not name.strip():
        raise ProductValidationError("name must not be empty")
    if price is not None and price < 0:
        raise ProductValidationError("price must be >= 0")
    if currency is not None and (len(currency) != 3 or not currency.isalpha()):
        raise ProductValidationError("currency must be a 3-letter code")
    if stock_quantity is not None and stock_quantity < 0:
        raise ProductValidationError("stock_quantity must be >= 0")

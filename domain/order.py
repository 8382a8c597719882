"""
Domain: Orders (read-mostly).

Orders are created outside this service; clients read their own orders and
administrators adjust order/payment status. No fulfillment automation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from .time import require_utc_timestamp


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


# Orders a client still waits on.
OPEN_ORDER_STATUSES: frozenset[OrderStatus] = frozenset(
    {OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PROCESSING}
)


@dataclass(frozen=True, slots=True)
class OrderItem:
    item_id: str
    product_id: Optional[str]
    quantity: int
    unit_price: Decimal
    total_price: Optional[Decimal] = None
    product_name: Optional[str] = None
    product_image_url: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Order:
    order_id: str
    client_id: str
    total_amount: Decimal
    currency: str
    order_status: OrderStatus
    payment_status: PaymentStatus
    delivery_address: Optional[str] = None
    items: List[OrderItem] = field(default_factory=list)

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
        if self.updated_at is not None:
            require_utc_timestamp("updated_at", self.updated_at)

    def is_open(self) -> bool:
        return self.order_status in OPEN_ORDER_STATUSES

"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from domain.document import Document
from domain.order import Order, OrderStatus, PaymentStatus
from domain.product import Product
from domain.profile import AccountStatus, Profile


# ============================================================================
# Account Models
# ============================================================================

class ProfileResponse(BaseModel):
    """Profile as exposed to its owner and to administrators."""
    id: str
    user_id: str
    email: str
    full_name: str
    phone: Optional[str] = None
    role: str
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, profile: Profile) -> "ProfileResponse":
        return cls(
            id=profile.profile_id,
            user_id=profile.user_id,
            email=profile.email,
            full_name=profile.full_name,
            phone=profile.phone,
            role=profile.role.value,
            status=profile.status.value,
            created_at=profile.created_at,
            updated_at=profile.updated_at,
        )


class SignInRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)

    class Config:
        json_schema_extra = {
            "example": {
                "email": "buyer@example.com",
                "password": "correct horse battery staple"
            }
        }


class SessionResponse(BaseModel):
    """Tokens for an admitted session plus the admitted profile."""
    access_token: str
    refresh_token: str
    expires_at: Optional[int] = None
    profile: ProfileResponse


class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=1)
    phone: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "email": "buyer@example.com",
                "password": "correct horse battery staple",
                "full_name": "Ana Buyer",
                "phone": "+1 555 0100"
            }
        }


class RegisterResponse(BaseModel):
    outcome: str  # "created" or "reactivated"
    profile: ProfileResponse
    message: str


class SignOutResponse(BaseModel):
    signed_out: bool
    message: str


# ============================================================================
# Product Models
# ============================================================================

class ProductResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    price: Decimal
    currency: str
    image_url: Optional[str] = None
    stock_quantity: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, product: Product) -> "ProductResponse":
        return cls(
            id=product.product_id,
            name=product.name,
            description=product.description,
            price=product.price,
            currency=product.currency,
            image_url=product.image_url,
            stock_quantity=product.stock_quantity,
            is_active=product.is_active,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class ProductCreateRequest(BaseModel):
    name: str
    description: Optional[str] = None
    price: Decimal
    currency: str = "USD"
    image_url: Optional[str] = None
    stock_quantity: int = 0
    is_active: bool = True

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Olive oil 1L",
                "description": "Cold pressed, local producer",
                "price": "12.50",
                "currency": "USD",
                "stock_quantity": 40
            }
        }


class ProductUpdateRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = None
    currency: Optional[str] = None
    image_url: Optional[str] = None
    stock_quantity: Optional[int] = None
    is_active: Optional[bool] = None


class UploadResponse(BaseModel):
    url: str


# ============================================================================
# Order Models
# ============================================================================

class OrderItemResponse(BaseModel):
    id: str
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    product_image_url: Optional[str] = None
    quantity: int
    unit_price: Decimal
    total_price: Optional[Decimal] = None


class OrderResponse(BaseModel):
    id: str
    client_id: str
    total_amount: Decimal
    currency: str
    order_status: str
    payment_status: str
    delivery_address: Optional[str] = None
    items: List[OrderItemResponse]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.order_id,
            client_id=order.client_id,
            total_amount=order.total_amount,
            currency=order.currency,
            order_status=order.order_status.value,
            payment_status=order.payment_status.value,
            delivery_address=order.delivery_address,
            items=[
                OrderItemResponse(
                    id=item.item_id,
                    product_id=item.product_id,
                    product_name=item.product_name,
                    product_image_url=item.product_image_url,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    total_price=item.total_price,
                )
                for item in order.items
            ],
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderStatusUpdateRequest(BaseModel):
    order_status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None

    class Config:
        json_schema_extra = {
            "example": {
                "order_status": "shipped",
                "payment_status": "paid"
            }
        }


# ============================================================================
# Document Models
# ============================================================================

class DocumentResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    file_url: str
    file_type: Optional[str] = None
    uploaded_by: str
    is_public: bool
    created_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, document: Document) -> "DocumentResponse":
        return cls(
            id=document.document_id,
            title=document.title,
            description=document.description,
            file_url=document.file_url,
            file_type=document.file_type,
            uploaded_by=document.uploaded_by,
            is_public=document.is_public,
            created_at=document.created_at,
        )


class DocumentCreateRequest(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    file_url: str = Field(..., min_length=1)
    file_type: Optional[str] = None
    is_public: bool = True


# ============================================================================
# Client Management Models
# ============================================================================

class ClientStatusUpdateRequest(BaseModel):
    status: AccountStatus = Field(..., description="active, inactive or blocked")


# ============================================================================
# Dashboard Models
# ============================================================================

class ClientDashboardResponse(BaseModel):
    total_orders: int
    pending_orders: int
    completed_orders: int
    total_documents: int


class AdminDashboardResponse(BaseModel):
    total_orders: int
    total_clients: int
    total_products: int
    total_revenue: Decimal


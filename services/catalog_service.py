"""
Catalog service: validated product writes and file uploads.

Security:
- Uploads are validated before they reach storage (type and size)
- Object names are generated server-side; the client's file name only
  contributes its extension
"""

from __future__ import annotations

import logging
import secrets
import time
from decimal import Decimal
from pathlib import PurePosixPath
from typing import Any, Mapping, Optional

from supabase import Client

from domain.product import Product, validate_product_fields
from repositories.client import StoreSettings
from repositories.product_repository import (
    create_product,
    get_product,
    update_product,
)
from repositories.storage_repository import upload_public_object

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = frozenset(
    {"name", "description", "price", "currency", "image_url", "stock_quantity", "is_active"}
)

# Documents may be any of these; product images must be image/*.
_DOCUMENT_TYPE_PREFIXES = ("application/pdf", "image/", "video/", "text/")


class UploadValidationError(ValueError):
    """Raised when an uploaded file is rejected before reaching storage."""


class ProductNotFoundError(LookupError):
    pass


def add_product(
    client: Client,
    name: str,
    price: Decimal,
    description: Optional[str] = None,
    currency: str = "USD",
    image_url: Optional[str] = None,
    stock_quantity: int = 0,
    is_active: bool = True,
) -> Product:
    validate_product_fields(name=name, price=price, currency=currency, stock_quantity=stock_quantity)

    product = create_product(
        client,
        {
            "name": name.strip(),
            "description": description,
            "price": price,
            "currency": currency.upper(),
            "image_url": image_url,
            "stock_quantity": stock_quantity,
            "is_active": is_active,
        },
    )
    logger.info("Product created", extra={"product_id": product.product_id})
    return product


def edit_product(client: Client, product_id: str, changes: Mapping[str, Any]) -> Product:
    """
    Apply a partial update to a product.

    Unknown keys are rejected; None values are skipped.
    """

    unknown = set(changes) - _UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown product fields: {sorted(unknown)}")

    fields = {key: value for key, value in changes.items() if value is not None}
    validate_product_fields(
        name=fields.get("name"),
        price=fields.get("price"),
        currency=fields.get("currency"),
        stock_quantity=fields.get("stock_quantity"),
    )
    if "currency" in fields:
        fields["currency"] = str(fields["currency"]).upper()

    if get_product(client, product_id) is None:
        raise ProductNotFoundError(f"Product not found: {product_id}")

    return update_product(client, product_id, fields)


def toggle_product(client: Client, product_id: str) -> Product:
    """Flip a product between listed and unlisted."""

    product = get_product(client, product_id)
    if product is None:
        raise ProductNotFoundError(f"Product not found: {product_id}")
    return update_product(client, product_id, {"is_active": not product.is_active})


def generate_object_name(filename: str) -> str:
    """
    Unique storage name: `<epoch-ms>-<random>.<ext>`.

    Example:
        generate_object_name("Photo.JPG")  # "1735689600000-k3j9x0q2ab.jpg"
    """

    suffix = PurePosixPath(filename).suffix.lower().lstrip(".")
    stem = f"{int(time.time() * 1000)}-{secrets.token_hex(5)}"
    return f"{stem}.{suffix}" if suffix else stem


def validate_image(content_type: str, size_bytes: int, max_size_mb: int) -> None:
    if not content_type or not content_type.startswith("image/"):
        raise UploadValidationError("Please select an image file")
    if size_bytes > max_size_mb * 1024 * 1024:
        raise UploadValidationError(f"File size must be less than {max_size_mb}MB")


def upload_product_image(
    client: Client,
    settings: StoreSettings,
    filename: str,
    content: bytes,
    content_type: str,
) -> str:
    """Validate and upload a product image. Returns its public URL."""

    validate_image(content_type, len(content), settings.max_image_size_mb)
    object_name = generate_object_name(filename)
    url = upload_public_object(
        client, settings.product_image_bucket, object_name, content, content_type
    )
    logger.info(
        "Product image uploaded",
        extra={"object_name": object_name, "size_bytes": len(content)},
    )
    return url


def upload_document_file(
    client: Client,
    settings: StoreSettings,
    filename: str,
    content: bytes,
    content_type: str,
) -> str:
    """Upload a document file (PDF, image, video or text). Returns its public URL."""

    if not content:
        raise UploadValidationError("File is empty")
    if not content_type or not content_type.startswith(_DOCUMENT_TYPE_PREFIXES):
        raise UploadValidationError(f"Unsupported document type: {content_type or 'unknown'}")

    object_name = generate_object_name(filename)
    url = upload_public_object(client, settings.document_bucket, object_name, content, content_type)
    logger.info("Document file uploaded", extra={"object_name": object_name})
    return url


__all__ = [
    "UploadValidationError",
    "ProductNotFoundError",
    "add_product",
    "edit_product",
    "toggle_product",
    "generate_object_name",
    "validate_image",
    "upload_product_image",
    "upload_document_file",
]

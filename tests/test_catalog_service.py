"""
Tests for `services/catalog_service.py`: product writes and uploads.
"""

from __future__ import annotations

import re
from decimal import Decimal

import pytest

from domain.product import ProductValidationError
from repositories.errors import StoreError
from repositories.product_repository import list_products
from services.catalog_service import (
    ProductNotFoundError,
    UploadValidationError,
    add_product,
    edit_product,
    generate_object_name,
    toggle_product,
    upload_document_file,
    upload_product_image,
    validate_image,
)


def test_add_product_normalizes_fields(store) -> None:
    product = add_product(store, name="  Olive oil ", price=Decimal("12.50"), currency="usd", stock_quantity=3)

    assert product.name == "Olive oil"
    assert product.currency == "USD"
    assert product.price == Decimal("12.5")
    assert store.tables["products"][0]["price"] == 12.5


def test_add_product_rejects_negative_price(store) -> None:
    with pytest.raises(ProductValidationError):
        add_product(store, name="Free money", price=Decimal("-1"))
    assert store.tables["products"] == []


def test_edit_product_applies_partial_update(store) -> None:
    row = store.seed_product("Tea", price=3.0)

    product = edit_product(store, row["id"], {"price": Decimal("4.25"), "description": None})

    assert product.price == Decimal("4.25")
    assert product.name == "Tea"


def test_edit_product_rejects_unknown_fields(store) -> None:
    row = store.seed_product("Tea")

    with pytest.raises(ValueError):
        edit_product(store, row["id"], {"sku": "T-1"})


def test_edit_missing_product_is_not_found(store) -> None:
    with pytest.raises(ProductNotFoundError):
        edit_product(store, "missing", {"name": "Anything"})


def test_toggle_product_hides_it_from_catalog(store) -> None:
    row = store.seed_product("Tea")

    product = toggle_product(store, row["id"])

    assert product.is_active is False
    assert list_products(store, active_only=True) == []
    assert toggle_product(store, row["id"]).is_active is True


def test_generate_object_name_keeps_lowercase_extension() -> None:
    name = generate_object_name("Holiday Photo.JPG")
    assert re.fullmatch(r"\d{13}-[0-9a-f]{10}\.jpg", name)
    assert generate_object_name("Holiday Photo.JPG") != name


def test_validate_image_rules() -> None:
    validate_image("image/png", 1024, max_size_mb=1)

    with pytest.raises(UploadValidationError):
        validate_image("application/pdf", 10, max_size_mb=1)
    with pytest.raises(UploadValidationError):
        validate_image("image/png", 1024 * 1024 + 1, max_size_mb=1)


def test_upload_product_image_stores_without_upsert(store, settings) -> None:
    url = upload_product_image(store, settings, "shot.png", b"\x89PNG...", "image/png")

    [(bucket, path)] = list(store.storage.objects)
    assert bucket == settings.product_image_bucket
    assert url.endswith(f"/{bucket}/{path}")
    options = store.storage.objects[(bucket, path)]["options"]
    assert options["cache-control"] == "3600"
    assert options["upsert"] == "false"


def test_upload_product_image_rejects_oversized_file(store, settings) -> None:
    with pytest.raises(UploadValidationError):
        upload_product_image(store, settings, "big.png", b"0" * (2 * 1024 * 1024), "image/png")
    assert store.storage.objects == {}


def test_storage_failure_is_store_error(store, settings) -> None:
    store.storage.fail_uploads = True

    with pytest.raises(StoreError):
        upload_product_image(store, settings, "shot.png", b"data", "image/png")


def test_upload_document_file_types(store, settings) -> None:
    url = upload_document_file(store, settings, "terms.pdf", b"%PDF-1.7", "application/pdf")
    assert f"/{settings.document_bucket}/" in url

    with pytest.raises(UploadValidationError):
        upload_document_file(store, settings, "tool.exe", b"MZ", "application/x-msdownload")
    with pytest.raises(UploadValidationError):
        upload_document_file(store, settings, "empty.pdf", b"", "application/pdf")

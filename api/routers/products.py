"""
Products API Endpoints.

Public catalog listing and administrator product management.
"""

from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from supabase import Client

from api.dependencies import get_settings, get_store_client, require_admin
from api.errors import store_http_error
from api.models import (
    ProductCreateRequest,
    ProductResponse,
    ProductUpdateRequest,
    UploadResponse,
)
from domain.product import ProductValidationError
from repositories.client import StoreSettings
from repositories.errors import RowNotFoundError, StoreError
from repositories.product_repository import delete_product, list_products
from services.catalog_service import (
    ProductNotFoundError,
    UploadValidationError,
    add_product,
    edit_product,
    toggle_product,
    upload_product_image,
)

router = APIRouter()


@router.get(
    "/products",
    response_model=List[ProductResponse],
    summary="List Catalog",
    description="Active products, newest first."
)
def list_catalog(client: Client = Depends(get_store_client)):
    try:
        products = list_products(client, active_only=True)
    except StoreError as exc:
        raise store_http_error(exc, "load products") from exc
    return [ProductResponse.from_domain(product) for product in products]


@router.get(
    "/admin/products",
    response_model=List[ProductResponse],
    summary="List All Products",
    dependencies=[Depends(require_admin)],
)
def list_all_products(client: Client = Depends(get_store_client)):
    try:
        products = list_products(client, active_only=False)
    except StoreError as exc:
        raise store_http_error(exc, "load products") from exc
    return [ProductResponse.from_domain(product) for product in products]


@router.post(
    "/admin/products",
    response_model=ProductResponse,
    status_code=201,
    summary="Create Product",
    dependencies=[Depends(require_admin)],
)
def create_catalog_product(request: ProductCreateRequest, client: Client = Depends(get_store_client)):
    try:
        product = add_product(
            client,
            name=request.name,
            price=request.price,
            description=request.description,
            currency=request.currency,
            image_url=request.image_url,
            stock_quantity=request.stock_quantity,
            is_active=request.is_active,
        )
    except ProductValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except StoreError as exc:
        raise store_http_error(exc, "save product") from exc
    return ProductResponse.from_domain(product)


@router.patch(
    "/admin/products/{product_id}",
    response_model=ProductResponse,
    summary="Update Product",
    dependencies=[Depends(require_admin)],
)
def update_catalog_product(
    product_id: str,
    request: ProductUpdateRequest,
    client: Client = Depends(get_store_client),
):
    try:
        product = edit_product(client, product_id, request.model_dump(exclude_unset=True))
    except ProductNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except StoreError as exc:
        raise store_http_error(exc, "save product") from exc
    return ProductResponse.from_domain(product)


@router.post(
    "/admin/products/{product_id}/toggle",
    response_model=ProductResponse,
    summary="Activate/Deactivate Product",
    dependencies=[Depends(require_admin)],
)
def toggle_catalog_product(product_id: str, client: Client = Depends(get_store_client)):
    try:
        product = toggle_product(client, product_id)
    except ProductNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except StoreError as exc:
        raise store_http_error(exc, "update product status") from exc
    return ProductResponse.from_domain(product)


@router.delete(
    "/admin/products/{product_id}",
    status_code=204,
    summary="Delete Product",
    dependencies=[Depends(require_admin)],
)
def delete_catalog_product(product_id: str, client: Client = Depends(get_store_client)):
    try:
        delete_product(client, product_id)
    except RowNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"Product not found: {product_id}") from exc
    except StoreError as exc:
        raise store_http_error(exc, "delete product") from exc


@router.post(
    "/admin/products/images",
    response_model=UploadResponse,
    status_code=201,
    summary="Upload Product Image",
    description="Upload an image (image/*, size-limited) and get its public URL.",
    dependencies=[Depends(require_admin)],
)
def upload_image(
    file: UploadFile = File(...),
    client: Client = Depends(get_store_client),
    settings: StoreSettings = Depends(get_settings),
):
    content = file.file.read()
    try:
        url = upload_product_image(
            client,
            settings,
            filename=file.filename or "upload",
            content=content,
            content_type=file.content_type or "",
        )
    except UploadValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except StoreError as exc:
        raise store_http_error(exc, "upload image") from exc
    return UploadResponse(url=url)

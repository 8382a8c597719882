"""
Documents API Endpoints.

Signed-in users see public documents; administrators manage all documents.
"""

from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from supabase import Client

from api.dependencies import get_current_profile, get_settings, get_store_client, require_admin
from api.errors import store_http_error
from api.models import DocumentCreateRequest, DocumentResponse, UploadResponse
from domain.profile import Profile
from repositories.client import StoreSettings
from repositories.document_repository import create_document, delete_document, list_documents
from repositories.errors import RowNotFoundError, StoreError
from services.catalog_service import UploadValidationError, upload_document_file

router = APIRouter()


@router.get(
    "/documents",
    response_model=List[DocumentResponse],
    summary="Shared Documents",
    description="Public documents, newest first.",
    dependencies=[Depends(get_current_profile)],
)
def shared_documents(client: Client = Depends(get_store_client)):
    try:
        documents = list_documents(client, public_only=True)
    except StoreError as exc:
        raise store_http_error(exc, "load documents") from exc
    return [DocumentResponse.from_domain(document) for document in documents]


@router.get(
    "/admin/documents",
    response_model=List[DocumentResponse],
    summary="All Documents",
    dependencies=[Depends(require_admin)],
)
def all_documents(client: Client = Depends(get_store_client)):
    try:
        documents = list_documents(client, public_only=False)
    except StoreError as exc:
        raise store_http_error(exc, "load documents") from exc
    return [DocumentResponse.from_domain(document) for document in documents]


@router.post(
    "/admin/documents",
    response_model=DocumentResponse,
    status_code=201,
    summary="Publish Document",
)
def publish_document(
    request: DocumentCreateRequest,
    admin: Profile = Depends(require_admin),
    client: Client = Depends(get_store_client),
):
    try:
        document = create_document(
            client,
            title=request.title,
            file_url=request.file_url,
            uploaded_by=admin.profile_id,
            description=request.description,
            file_type=request.file_type,
            is_public=request.is_public,
        )
    except StoreError as exc:
        raise store_http_error(exc, "save document") from exc
    return DocumentResponse.from_domain(document)


@router.post(
    "/admin/documents/upload",
    response_model=UploadResponse,
    status_code=201,
    summary="Upload Document File",
    description="Store a file in the document bucket and get its public URL.",
    dependencies=[Depends(require_admin)],
)
def upload_document(
    file: UploadFile = File(...),
    client: Client = Depends(get_store_client),
    settings: StoreSettings = Depends(get_settings),
):
    content = file.file.read()
    try:
        url = upload_document_file(
            client,
            settings,
            filename=file.filename or "document",
            content=content,
            content_type=file.content_type or "",
        )
    except UploadValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except StoreError as exc:
        raise store_http_error(exc, "upload document") from exc
    return UploadResponse(url=url)


@router.delete(
    "/admin/documents/{document_id}",
    status_code=204,
    summary="Delete Document",
    dependencies=[Depends(require_admin)],
)
def remove_document(document_id: str, client: Client = Depends(get_store_client)):
    try:
        delete_document(client, document_id)
    except RowNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"Document not found: {document_id}") from exc
    except StoreError as exc:
        raise store_http_error(exc, "delete document") from exc

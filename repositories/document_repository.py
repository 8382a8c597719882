"""
Document repository (persistence).

Document rows only hold metadata and a file URL; file bytes live in storage
(see storage_repository).
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from supabase import Client

from domain.document import Document
from domain.time import parse_optional_timestamp, to_iso_utc, utc_now
from repositories.client import execute, rows_of
from repositories.errors import RowNotFoundError

_DOCUMENTS_TABLE: str = "documents"


def _row_to_document(row: Mapping[str, Any]) -> Document:
    return Document(
        document_id=str(row["id"]),
        title=str(row["title"]),
        description=row.get("description"),
        file_url=str(row["file_url"]),
        file_type=row.get("file_type"),
        uploaded_by=str(row["uploaded_by"]),
        is_public=bool(row.get("is_public", True)),
        created_at=parse_optional_timestamp(row.get("created_at")),
    )


def list_documents(client: Client, public_only: bool = True) -> List[Document]:
    """List documents newest first; clients only ever get public ones."""

    query = client.table(_DOCUMENTS_TABLE).select("*")
    if public_only:
        query = query.eq("is_public", True)
    response = execute(query.order("created_at", desc=True), "list documents")
    return [_row_to_document(row) for row in rows_of(response)]


def count_public_documents(client: Client) -> int:
    response = execute(
        client.table(_DOCUMENTS_TABLE).select("id", count="exact").eq("is_public", True),
        "count documents",
    )
    count = getattr(response, "count", None)
    return int(count) if count is not None else len(rows_of(response))


def create_document(
    client: Client,
    title: str,
    file_url: str,
    uploaded_by: str,
    description: Optional[str] = None,
    file_type: Optional[str] = None,
    is_public: bool = True,
) -> Document:
    payload: dict[str, Any] = {
        "title": title,
        "description": description,
        "file_url": file_url,
        "file_type": file_type,
        "uploaded_by": uploaded_by,
        "is_public": is_public,
        "created_at": to_iso_utc(utc_now()),
    }
    response = execute(client.table(_DOCUMENTS_TABLE).insert(payload), "create document")
    rows = rows_of(response)
    if not rows:
        raise RowNotFoundError("Failed to create document: no row returned")
    return _row_to_document(rows[0])


def delete_document(client: Client, document_id: str) -> None:
    response = execute(
        client.table(_DOCUMENTS_TABLE).delete().eq("id", document_id),
        "delete document",
    )
    if not rows_of(response):
        raise RowNotFoundError(f"Failed to delete document: no document with id {document_id}")


__all__ = [
    "list_documents",
    "count_public_documents",
    "create_document",
    "delete_document",
]

"""
Domain: Shared documents.

Documents are published by administrators. Clients only ever see documents
with `is_public` set.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .time import require_utc_timestamp


@dataclass(frozen=True, slots=True)
class Document:
    document_id: str
    title: str
    file_url: str
    uploaded_by: str
    is_public: bool = True
    description: Optional[str] = None
    file_type: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)

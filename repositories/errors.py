"""Errors raised by the persistence layer."""

from __future__ import annotations

from typing import Optional


class StoreError(RuntimeError):
    """A Supabase table or storage operation failed."""

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.code = code


class DuplicateRowError(StoreError):
    """An insert hit a unique constraint."""


class RowNotFoundError(StoreError):
    """An update or delete matched no row."""

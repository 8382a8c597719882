"""
Supabase client construction and store settings.

This module contains the database connection setup. Unlike a module-level
client, a new client is built per unit of work (one HTTP request, one CLI
run) because a Supabase client carries the signed-in user's session: sharing
one between users would share their sessions.

Environment variables required:
- SUPABASE_URL: Your Supabase project URL
- SUPABASE_KEY: Your Supabase API key (use a server-side key only on the backend)

Optional:
- PRODUCT_IMAGE_BUCKET (default: product-images)
- DOCUMENT_BUCKET (default: documents)
- PROFILE_TRIGGER_GRACE_SECONDS (default: 0)
- PROFILE_INSERT_ATTEMPTS (default: 2)
- MAX_IMAGE_SIZE_MB (default: 5)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import httpx
from dotenv import load_dotenv
from postgrest.exceptions import APIError
from supabase import Client, ClientOptions, create_client

from repositories.errors import DuplicateRowError, StoreError

# Postgres error code for unique_violation.
UNIQUE_VIOLATION = "23505"

# Load environment variables from the .env file in the project root.
env_path = Path(__file__).parent.parent / ".env"


@dataclass(frozen=True, slots=True)
class StoreSettings:
    url: str
    key: str
    product_image_bucket: str = "product-images"
    document_bucket: str = "documents"
    profile_grace_seconds: float = 0.0
    profile_insert_attempts: int = 2
    max_image_size_mb: int = 5


def load_settings() -> StoreSettings:
    """Read store settings from the environment (and the project .env file)."""

    load_dotenv(dotenv_path=env_path)

    url: Optional[str] = os.getenv("SUPABASE_URL")
    key: Optional[str] = os.getenv("SUPABASE_KEY")

    if not url:
        raise RuntimeError(
            "Missing environment variable: SUPABASE_URL. "
            "Set SUPABASE_URL to your Supabase project URL."
        )

    if not key:
        raise RuntimeError(
            "Missing environment variable: SUPABASE_KEY. "
            "Set SUPABASE_KEY to your Supabase API key."
        )

    return StoreSettings(
        url=url,
        key=key,
        product_image_bucket=os.getenv("PRODUCT_IMAGE_BUCKET", "product-images"),
        document_bucket=os.getenv("DOCUMENT_BUCKET", "documents"),
        profile_grace_seconds=float(os.getenv("PROFILE_TRIGGER_GRACE_SECONDS", "0")),
        profile_insert_attempts=max(1, int(os.getenv("PROFILE_INSERT_ATTEMPTS", "2"))),
        max_image_size_mb=int(os.getenv("MAX_IMAGE_SIZE_MB", "5")),
    )


def create_store_client(settings: StoreSettings) -> Client:
    """
    Build a Supabase client whose session lives only in memory.

    Token auto-refresh is disabled: refreshes happen explicitly through the
    session manager so every refresh passes the status guard.
    """

    options = ClientOptions(persist_session=False, auto_refresh_token=False)
    return create_client(settings.url, settings.key, options=options)


def execute(query: Any, action: str) -> Any:
    """
    Run a PostgREST query, translating library errors into store errors.

    Args:
        query: A Supabase request builder (table(...).select(...)...)
        action: Short description used in the error message

    Returns:
        The API response (with `.data` and `.count`)

    Raises:
        DuplicateRowError: on a unique constraint violation
        StoreError: on any other API error or a failed HTTP request
    """

    try:
        response = query.execute()
    except APIError as exc:
        code = str(exc.code) if exc.code is not None else None
        if code == UNIQUE_VIOLATION:
            raise DuplicateRowError(f"Failed to {action}: {exc.message}", code=code) from exc
        raise StoreError(f"Failed to {action}: {exc.message}", code=code) from exc
    except httpx.HTTPError as exc:
        raise StoreError(f"Failed to {action}: {exc}") from exc

    error = getattr(response, "error", None)
    if error:
        raise StoreError(f"Failed to {action}: {error}")

    return response


def rows_of(response: Any) -> list[dict[str, Any]]:
    return list(getattr(response, "data", None) or [])


__all__ = [
    "StoreSettings",
    "load_settings",
    "create_store_client",
    "execute",
    "rows_of",
    "UNIQUE_VIOLATION",
]

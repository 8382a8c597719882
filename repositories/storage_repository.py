"""
Object storage (Supabase Storage buckets).

Uploads never overwrite: callers pick unique object names.
"""

from __future__ import annotations

from supabase import Client
from storage3.utils import StorageException

from repositories.errors import StoreError


def upload_public_object(
    client: Client,
    bucket: str,
    object_name: str,
    content: bytes,
    content_type: str,
    cache_seconds: int = 3600,
) -> str:
    """
    Upload bytes to a public bucket and return the object's public URL.

    Raises:
        StoreError: the upload was rejected (exists, bucket missing, ...)
    """

    storage = client.storage.from_(bucket)
    try:
        storage.upload(
            object_name,
            content,
            {
                "cache-control": str(cache_seconds),
                "content-type": content_type,
                "upsert": "false",
            },
        )
    except StorageException as exc:
        raise StoreError(f"Failed to upload {object_name} to {bucket}: {exc}") from exc

    return storage.get_public_url(object_name)


__all__ = ["upload_public_object"]

# =============================================================================
# lib/object_store.py - Object Store Client
# =============================================================================
# Wraps the Supabase Storage bucket that holds uploaded media files.
#
# Operations: save, get-metadata, signed read link, download, delete, list.
# Every call goes straight to Storage; nothing is cached and nothing is
# retried.
#
# Usage:
#   store = SupabaseObjectStore(SupabaseClient.get_client(), "media")
#   for name in store.list_names():
#       obj = store.get_metadata(name)
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Protocol

from supabase import Client

from lib.supabase_client import SupabaseClientError, is_not_found_error

logger = logging.getLogger(__name__)

# Page size used when enumerating the bucket
LIST_PAGE_SIZE = 1000


class ObjectNotFoundError(SupabaseClientError):
    """Raised when a storage key does not exist in the bucket."""

    def __init__(self, name: str, error: str | None = None):
        super().__init__(
            message=f"Object not found: {name}" + (f" ({error})" if error else ""),
            code="OBJECT_NOT_FOUND",
            suggestion="Check that the storage key includes its timestamp prefix",
            details={"name": name},
        )
        self.name = name


# =============================================================================
# Data Classes
# =============================================================================

def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO timestamp (with trailing Z) into an aware datetime."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


@dataclass
class StoredObject:
    """
    One object in the bucket, as described by its storage metadata.

    `name` is the storage key (``{epoch_millis}-{sanitized_name}``).
    `original_name` comes from the custom metadata written at upload.
    """
    name: str
    content_type: str
    size: int
    created_at: datetime
    original_name: str | None = None
    uploaded_at: str | None = None

    @classmethod
    def from_storage_info(cls, name: str, info: dict[str, Any]) -> "StoredObject":
        """Create StoredObject from a Storage object-info response."""
        # Storage has reported these keys in both snake and camel case
        system_meta = info.get("metadata") or {}
        user_meta = info.get("user_metadata") or {}
        if not user_meta and "originalName" in system_meta:
            user_meta = system_meta

        content_type = (
            info.get("content_type")
            or info.get("contentType")
            or system_meta.get("mimetype")
            or ""
        )
        size = info.get("size")
        if size is None:
            size = system_meta.get("size", 0)

        created_at = parse_timestamp(info.get("created_at") or info.get("createdAt"))
        if created_at is None:
            raise SupabaseClientError(
                message=f"Object info for {name} has no creation time",
                code="OBJECT_INFO_INCOMPLETE",
                details={"name": name},
            )

        return cls(
            name=name,
            content_type=content_type,
            size=int(size or 0),
            created_at=created_at,
            original_name=user_meta.get("originalName"),
            uploaded_at=user_meta.get("uploadedAt"),
        )

    @property
    def display_name(self) -> str:
        """Original upload name, falling back to the storage key."""
        return self.original_name or self.name


# =============================================================================
# Interface
# =============================================================================

class ObjectStore(Protocol):
    """Operations the application needs from an object store."""

    def save(
        self,
        name: str,
        data: bytes,
        content_type: str,
        metadata: dict[str, str],
    ) -> None: ...

    def get_metadata(self, name: str) -> StoredObject: ...

    def signed_url(self, name: str, expires_in: int) -> str: ...

    def public_url(self, name: str) -> str: ...

    def download(self, name: str) -> bytes: ...

    def delete(self, name: str) -> None: ...

    def list_names(self) -> list[str]: ...


# =============================================================================
# Supabase Storage Implementation
# =============================================================================

class SupabaseObjectStore:
    """
    Object store backed by a Supabase Storage bucket.

    All methods raise SupabaseClientError (or ObjectNotFoundError) on failure.
    """

    def __init__(self, client: Client, bucket: str):
        self.client = client
        self.bucket = bucket

    def _bucket(self):
        return self.client.storage.from_(self.bucket)

    def save(
        self,
        name: str,
        data: bytes,
        content_type: str,
        metadata: dict[str, str],
    ) -> None:
        """Write raw bytes under `name` with content type and custom metadata."""
        try:
            self._bucket().upload(
                path=name,
                file=data,
                file_options={
                    "content-type": content_type or "application/octet-stream",
                    "metadata": metadata,
                },
            )
            logger.debug(f"Saved object {name} ({len(data)} bytes)")
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to save object: {e}",
                code="SAVE_FAILED",
                suggestion=f"Check that bucket '{self.bucket}' exists and the service key can write to it",
                details={"name": name},
            )

    def get_metadata(self, name: str) -> StoredObject:
        """Fetch the storage metadata of one object."""
        try:
            info = self._bucket().info(name)
        except Exception as e:
            if is_not_found_error(e):
                raise ObjectNotFoundError(name, str(e))
            raise SupabaseClientError(
                message=f"Failed to fetch object metadata: {e}",
                code="GET_METADATA_FAILED",
                details={"name": name},
            )
        if not info:
            raise ObjectNotFoundError(name)
        return StoredObject.from_storage_info(name, dict(info))

    def signed_url(self, name: str, expires_in: int) -> str:
        """Create a time-limited read link valid for `expires_in` seconds."""
        try:
            response = self._bucket().create_signed_url(name, expires_in)
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to create signed URL: {e}",
                code="SIGNED_URL_FAILED",
                details={"name": name, "expires_in": expires_in},
            )
        url = response.get("signedURL") or response.get("signedUrl")
        if not url:
            raise SupabaseClientError(
                message="Signed URL response contained no URL",
                code="SIGNED_URL_FAILED",
                details={"name": name},
            )
        return url

    def public_url(self, name: str) -> str:
        """Permanent URL of the object (only readable if the bucket is public)."""
        return self._bucket().get_public_url(name)

    def download(self, name: str) -> bytes:
        """Download the raw bytes of one object."""
        try:
            return self._bucket().download(name)
        except Exception as e:
            if is_not_found_error(e):
                raise ObjectNotFoundError(name, str(e))
            raise SupabaseClientError(
                message=f"Failed to download object: {e}",
                code="DOWNLOAD_FAILED",
                details={"name": name},
            )

    def delete(self, name: str) -> None:
        """Delete one object. Storage reports nothing when the key is absent."""
        try:
            removed = self._bucket().remove([name])
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete object: {e}",
                code="DELETE_FAILED",
                details={"name": name},
            )
        if not removed:
            raise ObjectNotFoundError(name)

    def list_names(self) -> list[str]:
        """
        Enumerate every object key in the bucket root.

        Storage pages its listing, so this keeps requesting pages until a
        short page comes back. Folder placeholders (entries without an id)
        are skipped.
        """
        names: list[str] = []
        offset = 0

        try:
            while True:
                page = self._bucket().list(
                    None,
                    {
                        "limit": LIST_PAGE_SIZE,
                        "offset": offset,
                        "sortBy": {"column": "name", "order": "asc"},
                    },
                )
                page = page or []
                names.extend(
                    entry["name"] for entry in page
                    if entry.get("id") is not None and entry.get("name")
                )
                if len(page) < LIST_PAGE_SIZE:
                    break
                offset += LIST_PAGE_SIZE

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list bucket: {e}",
                code="LIST_FAILED",
                suggestion=f"Check that bucket '{self.bucket}' exists",
                details={"bucket": self.bucket, "offset": offset},
            )

        logger.debug(f"Listed {len(names)} objects in bucket {self.bucket}")
        return names

# =============================================================================
# core/services/upload_service.py - Media Upload
# =============================================================================
# Validates one uploaded file and stores it in the object store under a
# timestamp-prefixed storage key. Nothing is written to the metadata store:
# the external analysis pipeline creates that document later, keyed by the
# same storage key.
# =============================================================================

import logging
import re
from collections.abc import Callable
from datetime import datetime

from app.exceptions import FileTooLargeError, InvalidFileTypeError, StorageUploadError
from core.models.media import FileType, UploadedFile
from core.services.reconciliation_service import utc_now
from lib.object_store import ObjectStore
from lib.supabase_client import SupabaseClientError

logger = logging.getLogger(__name__)

MAX_UPLOAD_SIZE_BYTES = 100 * 1024 * 1024

ALLOWED_EXTENSIONS: dict[str, list[str]] = {
    "image": [".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp"],
    "video": [".mp4", ".avi", ".mov", ".mkv"],
    "audio": [".mp3", ".wav", ".flac"],
}

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


# =============================================================================
# Helper Functions
# =============================================================================

def sanitize_filename(name: str) -> str:
    """Replace every character outside [A-Za-z0-9.-] with an underscore."""
    return _UNSAFE_CHARS.sub("_", name)


def get_extension(name: str) -> str:
    """Lower-cased final dot-suffix including the dot, or "" if there is none."""
    dot = name.rfind(".")
    return name[dot:].lower() if dot != -1 else ""


def file_type_from_extension(name: str) -> FileType | None:
    """
    Classify by extension against the allow-list.

    Returns None for extensions that are not allowed. This is independent of
    FileType.from_content_type and may disagree with it.
    """
    ext = get_extension(name)
    for kind, extensions in ALLOWED_EXTENSIONS.items():
        if ext in extensions:
            return FileType(kind)
    return None


def epoch_millis(moment: datetime) -> int:
    return int(moment.timestamp()) * 1000 + moment.microsecond // 1000


def build_storage_key(name: str, timestamp_ms: int) -> str:
    """Storage key format: ``{epoch_millis}-{sanitized_name}``."""
    return f"{timestamp_ms}-{sanitize_filename(name)}"


# =============================================================================
# Service
# =============================================================================

class UploadService:
    """Validates and stores uploaded media files."""

    def __init__(
        self,
        object_store: ObjectStore,
        max_size_bytes: int = MAX_UPLOAD_SIZE_BYTES,
        url_expiry_seconds: int = 24 * 60 * 60,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.object_store = object_store
        self.max_size_bytes = max_size_bytes
        self.url_expiry_seconds = url_expiry_seconds
        self.clock = clock

    def validate(self, filename: str, size: int) -> FileType:
        """
        Check size and extension before anything is written.

        Raises:
            FileTooLargeError: If size exceeds the ceiling
            InvalidFileTypeError: If the extension is not allowed
        """
        if size > self.max_size_bytes:
            raise FileTooLargeError(size, self.max_size_bytes // (1024 * 1024))

        file_type = file_type_from_extension(filename)
        if file_type is None:
            raise InvalidFileTypeError(filename, ALLOWED_EXTENSIONS)
        return file_type

    def upload(self, data: bytes, filename: str, content_type: str | None) -> UploadedFile:
        """
        Store one file and return its identifier and a signed link.

        Re-uploading identical bytes produces a new, distinct storage key.

        Raises:
            FileTooLargeError, InvalidFileTypeError: On validation failure
            StorageUploadError: If the object store rejects the write
        """
        file_type = self.validate(filename, len(data))

        now = self.clock()
        storage_key = build_storage_key(filename, epoch_millis(now))
        content_type = content_type or ""

        logger.info(f"Uploading file: {storage_key} ({len(data)} bytes)")

        try:
            self.object_store.save(
                storage_key,
                data,
                content_type,
                metadata={
                    "originalName": filename,
                    "uploadedAt": now.isoformat(),
                },
            )
            download_url = self.object_store.signed_url(storage_key, self.url_expiry_seconds)
            public_url = self.object_store.public_url(storage_key)
        except SupabaseClientError as e:
            logger.error(f"Upload error: {e}")
            raise StorageUploadError(e.message)

        logger.info(f"File uploaded successfully: {storage_key}")

        return UploadedFile(
            id=storage_key,
            name=filename,
            file_name=storage_key,
            size=len(data),
            content_type=content_type,
            file_type=file_type,
            created_at=now,
            download_url=download_url,
            preview_url=download_url if file_type == FileType.IMAGE else None,
            public_url=public_url,
        )

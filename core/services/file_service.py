# =============================================================================
# core/services/file_service.py - Single-File Operations
# =============================================================================
# Detail view, download, delete and metadata lookup for one storage key.
# =============================================================================

import logging
from collections.abc import Callable
from datetime import date, datetime, timedelta
from typing import Any

from app.exceptions import (
    FileFetchError,
    FileNotFoundInStorageError,
    MetadataLookupError,
    StorageDownloadError,
)
from core.models.media import FileType, ReconciledFile, missing_metadata_fields
from core.services.reconciliation_service import (
    DEFAULT_PROCESSING_THRESHOLD,
    build_reconciled_file,
    utc_now,
)
from lib.metadata_store import MetadataStore
from lib.object_store import ObjectNotFoundError, ObjectStore, StoredObject
from lib.supabase_client import SupabaseClientError

logger = logging.getLogger(__name__)


def normalize_document(data: Any) -> Any:
    """
    Make a metadata document JSON-friendly.

    Timestamps become ISO strings, recursively through nested dicts and lists.
    """
    if isinstance(data, (datetime, date)):
        return data.isoformat()
    if isinstance(data, dict):
        return {key: normalize_document(value) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [normalize_document(item) for item in data]
    return data


class FileService:
    """Operations on one file identified by its storage key."""

    def __init__(
        self,
        object_store: ObjectStore,
        metadata_store: MetadataStore,
        url_expiry_seconds: int = 60 * 60,
        processing_threshold: timedelta = DEFAULT_PROCESSING_THRESHOLD,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.object_store = object_store
        self.metadata_store = metadata_store
        self.url_expiry_seconds = url_expiry_seconds
        self.processing_threshold = processing_threshold
        self.clock = clock

    # -------------------------------------------------------------------------
    # Detail
    # -------------------------------------------------------------------------

    def get_file(self, file_id: str) -> ReconciledFile:
        """
        Fetch one file with a fresh 1-hour link and its AI analysis.

        A failed metadata query degrades to hasMetadata=false rather than
        failing the request.

        Raises:
            FileNotFoundInStorageError: If the object does not exist
            FileFetchError: If the object store fails
        """
        logger.info(f"Fetching file details for: {file_id}")

        try:
            obj = self.object_store.get_metadata(file_id)
        except ObjectNotFoundError as e:
            raise FileNotFoundInStorageError(file_id, e.message)
        except SupabaseClientError as e:
            raise FileFetchError(e.message)

        try:
            doc = self.metadata_store.find_one("fileName", file_id)
        except SupabaseClientError as e:
            logger.warning(f"Metadata lookup failed for {file_id}: {e}")
            doc = None

        try:
            return build_reconciled_file(
                self.object_store,
                obj,
                doc,
                self.url_expiry_seconds,
                self.clock(),
                self.processing_threshold,
            )
        except SupabaseClientError as e:
            raise FileFetchError(e.message)

    # -------------------------------------------------------------------------
    # Download
    # -------------------------------------------------------------------------

    def download(self, file_id: str) -> tuple[StoredObject, bytes]:
        """
        Fetch an object's metadata and raw bytes.

        Raises:
            FileNotFoundInStorageError: If the object does not exist
            StorageDownloadError: If the object store fails
        """
        logger.info(f"Downloading file: {file_id}")

        try:
            obj = self.object_store.get_metadata(file_id)
            data = self.object_store.download(file_id)
        except ObjectNotFoundError as e:
            raise FileNotFoundInStorageError(file_id, e.message)
        except SupabaseClientError as e:
            logger.error(f"Download error: {e}")
            raise StorageDownloadError(e.message)

        return obj, data

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    def delete(self, file_id: str) -> None:
        """
        Best-effort delete from both stores.

        Each side's failure (including "not there") is logged and tolerated,
        so deleting an unknown id succeeds.
        """
        logger.info(f"Deleting file with ID: {file_id}")

        try:
            self.object_store.delete(file_id)
            logger.info(f"File deleted from bucket: {file_id}")
        except SupabaseClientError as e:
            logger.warning(f"File not deleted from bucket: {file_id} ({e})")

        try:
            doc = self.metadata_store.find_one("fileName", file_id)
            if doc is not None:
                self.metadata_store.delete(doc.get("id"))
                logger.info(f"Metadata deleted: {doc.get('id')}")
        except SupabaseClientError as e:
            logger.warning(f"Error deleting metadata for {file_id}: {e}")

        logger.info(f"File deletion completed: {file_id}")

    # -------------------------------------------------------------------------
    # Metadata Lookup
    # -------------------------------------------------------------------------

    def lookup_metadata(self, file_name: str) -> dict[str, Any]:
        """
        Find the metadata document for a storage key.

        Tries an exact `fileName` match, then an `originalName` match. A miss
        is a normal result carrying debug context (the key searched and the
        number of documents in the store) to help spot key mismatches.

        Raises:
            MetadataLookupError: If the fileName query or the document count fails
        """
        logger.info(f"Fetching metadata for fileName: {file_name}")

        try:
            doc = self.metadata_store.find_one("fileName", file_name)
            if doc is None:
                doc = self._find_by_original_name(file_name)

            if doc is None:
                total = self.metadata_store.count()
                logger.info(f"Metadata not found for {file_name} ({total} documents in store)")
                return {
                    "success": False,
                    "error": "Metadata not found",
                    "metadata": None,
                    "debug": {
                        "searchedFileName": file_name,
                        "totalDocuments": total,
                    },
                }
        except SupabaseClientError as e:
            logger.error(f"Error fetching metadata: {e}")
            raise MetadataLookupError(e.message)

        metadata = normalize_document(doc)
        file_type = self._guess_file_type(doc)
        missing = missing_metadata_fields(doc, file_type)
        metadata["isComplete"] = not missing
        metadata["missingFields"] = missing

        return {"success": True, "metadata": metadata}

    def _find_by_original_name(self, file_name: str) -> dict[str, Any] | None:
        """Best-effort fallback: not every metadata table has an originalName column."""
        logger.info(f"No metadata found for fileName: {file_name}, trying originalName")
        try:
            return self.metadata_store.find_one("originalName", file_name)
        except SupabaseClientError as e:
            logger.warning(f"originalName lookup failed for {file_name}: {e}")
            return None

    def _guess_file_type(self, doc: dict[str, Any]) -> FileType:
        """Kind of the analysed file, from the document or the bucket object."""
        declared = doc.get("fileType") or doc.get("contentType")
        if declared in {t.value for t in FileType}:
            return FileType(declared)
        if declared:
            return FileType.from_content_type(declared)

        try:
            obj = self.object_store.get_metadata(doc.get("fileName", ""))
        except SupabaseClientError:
            return FileType.UNKNOWN
        return FileType.from_content_type(obj.content_type)

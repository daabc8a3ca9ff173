# =============================================================================
# core/services/reconciliation_service.py - Bucket/Metadata Reconciliation
# =============================================================================
# Joins the object-store listing with the metadata-store snapshot by storage
# key and derives, per file:
# - file type (from content type)
# - status (completed / processing / uploaded)
# - a fresh signed download link
# - the AI analysis projection, when a metadata document exists
#
# Both stores are enumerated in full on every call. There is no cache, so the
# cost is O(objects + documents) per request.
# =============================================================================

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import Any

from core.models.media import AIAnalysis, FileStatus, FileType, ReconciledFile
from lib.metadata_store import MetadataStore
from lib.object_store import ObjectStore, StoredObject

logger = logging.getLogger(__name__)

# Placeholder thumbnails for kinds that have no inline preview
THUMBNAILS = {
    FileType.VIDEO: "/video-thumbnail.jpg",
    FileType.AUDIO: "/audio-thumbnail.jpg",
    FileType.UNKNOWN: "/placeholder.jpg",
}

DEFAULT_PROCESSING_THRESHOLD = timedelta(minutes=10)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Pure Helpers
# =============================================================================

def index_metadata(documents: list[dict[str, Any]]) -> dict[str, dict[str, Any]]:
    """
    Map storage key -> metadata document.

    Documents without a `fileName` cannot be joined and are skipped.
    When two documents share a key, the later one wins.
    """
    index: dict[str, dict[str, Any]] = {}
    for doc in documents:
        file_name = doc.get("fileName")
        if file_name:
            index[file_name] = doc
    return index


def classify_status(
    has_metadata: bool,
    created_at: datetime,
    now: datetime,
    threshold: timedelta = DEFAULT_PROCESSING_THRESHOLD,
) -> FileStatus:
    """
    Derive a file's status.

    completed if metadata exists; otherwise processing once more than
    `threshold` has elapsed since creation, else uploaded. Never returns
    error: a file whose analysis never arrives stays processing.
    """
    if has_metadata:
        return FileStatus.COMPLETED
    if now - created_at > threshold:
        return FileStatus.PROCESSING
    return FileStatus.UPLOADED


def preview_url_for(file_type: FileType | str, download_url: str) -> str:
    """Images preview inline; other kinds get a placeholder thumbnail."""
    file_type = FileType(file_type)
    if file_type == FileType.IMAGE:
        return download_url
    return THUMBNAILS[file_type]


def build_reconciled_file(
    object_store: ObjectStore,
    obj: StoredObject,
    doc: dict[str, Any] | None,
    url_expiry_seconds: int,
    now: datetime,
    threshold: timedelta = DEFAULT_PROCESSING_THRESHOLD,
) -> ReconciledFile:
    """
    Join one stored object with its (optional) metadata document.

    Generates a fresh signed link valid for `url_expiry_seconds`.
    """
    file_type = FileType.from_content_type(obj.content_type)
    has_metadata = doc is not None
    download_url = object_store.signed_url(obj.name, url_expiry_seconds)

    return ReconciledFile(
        id=obj.name,
        name=obj.display_name,
        file_name=obj.name,
        file_type=file_type,
        size=obj.size,
        content_type=obj.content_type,
        status=classify_status(has_metadata, obj.created_at, now, threshold),
        created_at=obj.created_at,
        download_url=download_url,
        preview_url=preview_url_for(file_type, download_url),
        public_url=object_store.public_url(obj.name),
        has_metadata=has_metadata,
        ai_analysis=AIAnalysis.from_document(doc) if has_metadata else None,
    )


# =============================================================================
# Service
# =============================================================================

class ReconciliationService:
    """
    Produces the list of ReconciledFile shown by the library.

    Read-only with respect to both stores.
    """

    def __init__(
        self,
        object_store: ObjectStore,
        metadata_store: MetadataStore,
        url_expiry_seconds: int = 24 * 60 * 60,
        processing_threshold: timedelta = DEFAULT_PROCESSING_THRESHOLD,
        max_workers: int = 8,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.object_store = object_store
        self.metadata_store = metadata_store
        self.url_expiry_seconds = url_expiry_seconds
        self.processing_threshold = processing_threshold
        self.max_workers = max_workers
        self.clock = clock

    def _reconcile_one(
        self,
        name: str,
        metadata_index: dict[str, dict[str, Any]],
        now: datetime,
    ) -> ReconciledFile | None:
        try:
            obj = self.object_store.get_metadata(name)
            return build_reconciled_file(
                self.object_store,
                obj,
                metadata_index.get(name),
                self.url_expiry_seconds,
                now,
                self.processing_threshold,
            )
        except Exception as e:
            logger.error(f"Error processing file {name}: {e}")
            return None

    def list_files(self) -> list[ReconciledFile]:
        """
        Reconcile the whole bucket against the whole metadata table.

        Per-file work (metadata fetch + signed link) fans out over a thread
        pool; results come back in listing order. A file whose enrichment
        fails is dropped. Listing or snapshot failures propagate.

        Raises:
            SupabaseClientError: If the listing or the snapshot fails
        """
        names = self.object_store.list_names()
        logger.info(f"Found {len(names)} files in bucket")

        metadata_index = index_metadata(self.metadata_store.get_all())
        logger.info(f"Found {len(metadata_index)} metadata documents")

        now = self.clock()

        if not names:
            return []

        workers = min(self.max_workers, len(names))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = pool.map(
                lambda name: self._reconcile_one(name, metadata_index, now),
                names,
            )
            files = [f for f in results if f is not None]

        dropped = len(names) - len(files)
        if dropped:
            logger.warning(f"Dropped {dropped} files that failed to reconcile")

        return files

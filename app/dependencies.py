# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for the stores and services.
# Route handlers never reach for a global client: they receive store handles
# through Depends(), which tests replace via app.dependency_overrides.
# =============================================================================

from datetime import timedelta
from typing import Annotated

from fastapi import Depends

from app.config import settings
from core.services.file_service import FileService
from core.services.reconciliation_service import ReconciliationService
from core.services.upload_service import UploadService
from lib.metadata_store import MetadataStore, SupabaseMetadataStore
from lib.object_store import ObjectStore, SupabaseObjectStore
from lib.supabase_client import SupabaseClient


# =============================================================================
# Stores
# =============================================================================

def get_object_store() -> ObjectStore:
    """Object store over the configured Storage bucket."""
    return SupabaseObjectStore(SupabaseClient.get_client(), settings.STORAGE_BUCKET)


def get_metadata_store() -> MetadataStore:
    """Metadata store over the configured table."""
    return SupabaseMetadataStore(SupabaseClient.get_client(), settings.METADATA_TABLE)


ObjectStoreDep = Annotated[ObjectStore, Depends(get_object_store)]
MetadataStoreDep = Annotated[MetadataStore, Depends(get_metadata_store)]


# =============================================================================
# Services
# =============================================================================

def get_reconciliation_service(
    object_store: ObjectStoreDep,
    metadata_store: MetadataStoreDep,
) -> ReconciliationService:
    return ReconciliationService(
        object_store,
        metadata_store,
        url_expiry_seconds=settings.LIST_URL_EXPIRY_SECONDS,
        processing_threshold=timedelta(minutes=settings.PROCESSING_THRESHOLD_MINUTES),
        max_workers=settings.RECONCILE_MAX_WORKERS,
    )


def get_upload_service(object_store: ObjectStoreDep) -> UploadService:
    return UploadService(
        object_store,
        max_size_bytes=settings.max_upload_size_bytes,
        url_expiry_seconds=settings.LIST_URL_EXPIRY_SECONDS,
    )


def get_file_service(
    object_store: ObjectStoreDep,
    metadata_store: MetadataStoreDep,
) -> FileService:
    return FileService(
        object_store,
        metadata_store,
        url_expiry_seconds=settings.DETAIL_URL_EXPIRY_SECONDS,
        processing_threshold=timedelta(minutes=settings.PROCESSING_THRESHOLD_MINUTES),
    )


# Type aliases for dependency injection
ReconciliationServiceDep = Annotated[ReconciliationService, Depends(get_reconciliation_service)]
UploadServiceDep = Annotated[UploadService, Depends(get_upload_service)]
FileServiceDep = Annotated[FileService, Depends(get_file_service)]

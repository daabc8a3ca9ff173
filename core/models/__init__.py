# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - media.py: file kinds, statuses, AI analysis projection, reconciled files
#   and the response envelopes of the library endpoints
#
# These models define the "contract" between API and clients.
# =============================================================================

from .media import (
    AIAnalysis,
    DeleteResponse,
    FileDetailResponse,
    FileListResponse,
    FileStatus,
    FileType,
    ReconciledFile,
    UploadedFile,
    UploadResponse,
    is_metadata_complete,
    missing_metadata_fields,
)

__all__ = [
    "AIAnalysis",
    "DeleteResponse",
    "FileDetailResponse",
    "FileListResponse",
    "FileStatus",
    "FileType",
    "ReconciledFile",
    "UploadedFile",
    "UploadResponse",
    "is_metadata_complete",
    "missing_metadata_fields",
]

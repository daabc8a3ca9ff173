# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .reconciliation_service import ReconciliationService
from .upload_service import UploadService
from .file_service import FileService
from .query_service import FileQuery, apply_query

__all__ = [
    "ReconciliationService",
    "UploadService",
    "FileService",
    "FileQuery",
    "apply_query",
]

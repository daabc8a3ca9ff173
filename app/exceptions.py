# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error response carries a human-readable `error`, a machine-readable
# `code`, and optionally `details` (underlying error text) and `suggestion`.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class MediaVaultException(Exception):
    """
    Base exception for the MediaVault API.

    All custom exceptions inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: str = "MEDIAVAULT_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result: dict[str, Any] = {
            "success": False,
            "error": self.message,
            "code": self.code,
        }
        if self.details:
            result["details"] = self.details
        if self.suggestion:
            result["suggestion"] = self.suggestion
        return result


# =============================================================================
# Upload Validation Exceptions (400)
# =============================================================================

class NoFileProvidedError(MediaVaultException):
    """Raised when the multipart form carries no `file` field."""

    def __init__(self):
        super().__init__(
            message="No file provided",
            code="NO_FILE",
            status_code=400,
            suggestion="Send the file as multipart form field 'file'",
        )


class InvalidFileTypeError(MediaVaultException):
    """Raised when the uploaded file's extension is not in the allow-list."""

    def __init__(self, filename: str, allowed: dict[str, list[str]]):
        lines = [f"{kind.capitalize()}: {', '.join(exts)}" for kind, exts in allowed.items()]
        super().__init__(
            message="File type not allowed. Allowed extensions: " + "; ".join(lines),
            code="INVALID_FILE_TYPE",
            status_code=400,
            details=f"Rejected file: {filename}",
        )
        self.filename = filename


class FileTooLargeError(MediaVaultException):
    """Raised when uploaded file exceeds the size limit."""

    def __init__(self, size_bytes: int, max_mb: int):
        size_mb = size_bytes / (1024 * 1024)
        super().__init__(
            message=f"File size exceeds {max_mb}MB limit. Your file is {size_mb:.2f}MB",
            code="FILE_TOO_LARGE",
            status_code=400,
            suggestion=f"Upload a file smaller than {max_mb}MB",
        )
        self.size_bytes = size_bytes


# =============================================================================
# Lookup Exceptions (404)
# =============================================================================

class FileNotFoundInStorageError(MediaVaultException):
    """Raised when a storage key does not exist in the bucket."""

    def __init__(self, file_id: str, error: str | None = None):
        super().__init__(
            message=f"File not found: {file_id}",
            code="FILE_NOT_FOUND",
            status_code=404,
            suggestion="Check that the file id is the full storage key returned by upload",
            details=error,
        )
        self.file_id = file_id


# =============================================================================
# Infrastructure Exceptions (500)
# =============================================================================

class StorageUploadError(MediaVaultException):
    """Raised when file upload to storage fails."""

    def __init__(self, error: str):
        super().__init__(
            message="Upload failed",
            code="STORAGE_UPLOAD_ERROR",
            status_code=500,
            details=error,
        )


class StorageDownloadError(MediaVaultException):
    """Raised when file download from storage fails."""

    def __init__(self, error: str):
        super().__init__(
            message="Failed to download file",
            code="STORAGE_DOWNLOAD_ERROR",
            status_code=500,
            details=error,
        )


class FileFetchError(MediaVaultException):
    """Raised when a single file's details cannot be fetched."""

    def __init__(self, error: str):
        super().__init__(
            message="Failed to fetch file",
            code="FILE_FETCH_ERROR",
            status_code=500,
            details=error,
        )


class FileListError(MediaVaultException):
    """Raised when the bucket listing or the metadata snapshot fails."""

    def __init__(self, error: str):
        super().__init__(
            message="Failed to fetch files",
            code="FILE_LIST_ERROR",
            status_code=500,
            suggestion="Check that the storage bucket and metadata table are reachable",
            details=error,
        )


class MetadataLookupError(MediaVaultException):
    """Raised when the metadata store cannot be queried."""

    def __init__(self, error: str):
        super().__init__(
            message="Failed to fetch metadata",
            code="METADATA_LOOKUP_ERROR",
            status_code=500,
            details=error,
        )

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["metadata"] = None
        return result


class SearchProxyError(MediaVaultException):
    """Raised when the external search function cannot be reached."""

    def __init__(self, error: str):
        super().__init__(
            message="Search failed",
            code="SEARCH_PROXY_ERROR",
            status_code=500,
            details=error,
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def mediavault_exception_handler(
    request: Request,
    exc: MediaVaultException
) -> JSONResponse:
    """Convert MediaVaultException to JSON response."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle request validation errors (bad query parameters).

    Invalid input is a 400 in this API.
    """
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": "Validation error",
            "code": "VALIDATION_ERROR",
            "details": str(exc),
        }
    )

# =============================================================================
# app/routers/files.py - Media Library Endpoints
# =============================================================================
# List/search, detail, download and delete for files in the library.
# Files are addressed by their storage key (e.g. "1718000000000-cat.jpg").
# =============================================================================

import logging
import re
from typing import Annotated, Literal
from urllib.parse import quote

from fastapi import APIRouter, Path, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from app.dependencies import FileServiceDep, ReconciliationServiceDep
from app.exceptions import FileListError
from core.models.media import DeleteResponse, FileDetailResponse, FileListResponse
from core.services.query_service import DEFAULT_LIMIT, FileQuery, apply_query
from lib.supabase_client import SupabaseClientError

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Helper Functions
# =============================================================================

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def _quoted(value: str) -> str:
    """HTTP quoted-string body: backslash and double quote are escaped."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _content_disposition(filename: str) -> str:
    """
    Attachment header carrying the original upload name.

    Control characters (CR/LF included) are dropped. Header values must be
    latin-1, so names outside it also get an RFC 5987 `filename*` parameter
    and an underscore-escaped fallback.
    """
    filename = _CONTROL_CHARS.sub("", filename)
    try:
        filename.encode("latin-1")
        return f'attachment; filename="{_quoted(filename)}"'
    except UnicodeEncodeError:
        fallback = filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
        return f"attachment; filename=\"{_quoted(fallback)}\"; filename*=UTF-8''{quote(filename, safe='')}"


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/files", response_model=FileListResponse)
async def list_files(
    reconciliation: ReconciliationServiceDep,
    file_type: Annotated[
        str | None,
        Query(alias="fileType", description="image, video, audio, or all"),
    ] = None,
    search_text: Annotated[
        str | None,
        Query(alias="searchText", description="Substring matched against names and AI metadata"),
    ] = None,
    limit: Annotated[int, Query(ge=0, description="Page size")] = DEFAULT_LIMIT,
    offset: Annotated[int, Query(ge=0, description="Items to skip")] = 0,
    sort_by: Annotated[
        Literal["name", "createdAt"],
        Query(alias="sortBy", description="Sort field"),
    ] = "createdAt",
    sort_order: Annotated[
        Literal["asc", "desc"],
        Query(alias="sortOrder", description="Sort direction"),
    ] = "desc",
):
    """
    List library files joined with their AI metadata.

    Enumerates the whole bucket and the whole metadata table on every call,
    then filters, searches, sorts and paginates in memory. `total` counts
    matches before pagination.
    """
    logger.info(
        f"Fetching files with params: fileType={file_type} searchText={search_text} "
        f"limit={limit} offset={offset}"
    )

    try:
        files = await run_in_threadpool(reconciliation.list_files)
    except SupabaseClientError as e:
        logger.error(f"Error fetching files: {e}")
        raise FileListError(e.message)

    query = FileQuery(
        file_type=file_type,
        search_text=search_text,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
    )
    page, total = apply_query(files, query)

    logger.info(f"Returning {len(page)} files ({total} total after filtering)")

    return FileListResponse(files=page, total=total, limit=limit, offset=offset)


@router.get("/files/{file_id}", response_model=FileDetailResponse)
async def get_file(
    file_id: Annotated[str, Path(description="Storage key")],
    file_service: FileServiceDep,
):
    """
    Get one file with a fresh 1-hour download link and its AI analysis.
    """
    file = await run_in_threadpool(file_service.get_file, file_id)
    return FileDetailResponse(file=file)


@router.delete("/files/{file_id}", response_model=DeleteResponse)
async def delete_file(
    file_id: Annotated[str, Path(description="Storage key")],
    file_service: FileServiceDep,
):
    """
    Delete a file from the bucket and its metadata document.

    Best-effort: succeeds even when either side had nothing to delete.
    """
    await run_in_threadpool(file_service.delete, file_id)

    return DeleteResponse(message="File deleted successfully")


@router.get("/files/{file_id}/download")
async def download_file(
    file_id: Annotated[str, Path(description="Storage key")],
    file_service: FileServiceDep,
):
    """
    Download the raw bytes under the original upload name.
    """
    obj, data = await run_in_threadpool(file_service.download, file_id)

    return Response(
        content=data,
        media_type=obj.content_type or "application/octet-stream",
        headers={
            "Content-Disposition": _content_disposition(obj.display_name),
            "Content-Length": str(len(data)),
        },
    )

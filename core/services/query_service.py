# =============================================================================
# core/services/query_service.py - Filter, Search, Sort, Paginate
# =============================================================================
# Applies a FileQuery to the reconciled file list, in this order:
# 1. file type filter
# 2. free-text search (name, plus AI metadata when present)
# 3. sort (name or creation time)
# 4. offset/limit pagination
# =============================================================================

from dataclasses import dataclass
from typing import Literal

from core.models.media import ReconciledFile

SortField = Literal["name", "createdAt"]
SortOrder = Literal["asc", "desc"]

DEFAULT_LIMIT = 100


@dataclass
class FileQuery:
    """
    Parameters of a library listing request.

    file_type of None or "all" disables the type filter; an empty
    search_text disables search.
    """
    file_type: str | None = None
    search_text: str | None = None
    sort_by: SortField = "createdAt"
    sort_order: SortOrder = "desc"
    limit: int = DEFAULT_LIMIT
    offset: int = 0


def filter_by_type(files: list[ReconciledFile], file_type: str | None) -> list[ReconciledFile]:
    if not file_type or file_type == "all":
        return files
    return [f for f in files if f.file_type == file_type]


def matches_search(file: ReconciledFile, search_text: str) -> bool:
    """
    Case-insensitive substring match.

    The display name is always searched. Tags, topics, transcript and
    extracted text are only searched when the file has metadata.
    """
    needle = search_text.lower()

    if needle in file.name.lower():
        return True

    if file.has_metadata and file.ai_analysis:
        return any(needle in text.lower() for text in file.ai_analysis.searchable_text() if text)

    return False


def search_files(files: list[ReconciledFile], search_text: str | None) -> list[ReconciledFile]:
    if not search_text:
        return files
    return [f for f in files if matches_search(f, search_text)]


def sort_files(
    files: list[ReconciledFile],
    sort_by: SortField = "createdAt",
    sort_order: SortOrder = "desc",
) -> list[ReconciledFile]:
    """Sort by display name (case-insensitive) or creation time."""
    if sort_by == "name":
        key = lambda f: (f.name.casefold(), f.name)
    else:
        key = lambda f: f.created_at
    return sorted(files, key=key, reverse=(sort_order == "desc"))


def paginate(files: list[ReconciledFile], offset: int, limit: int) -> list[ReconciledFile]:
    return files[offset:offset + limit]


def apply_query(files: list[ReconciledFile], query: FileQuery) -> tuple[list[ReconciledFile], int]:
    """
    Run the full pipeline.

    Returns:
        (page of files, total matches before pagination)
    """
    matched = search_files(filter_by_type(files, query.file_type), query.search_text)
    ordered = sort_files(matched, query.sort_by, query.sort_order)
    return paginate(ordered, query.offset, query.limit), len(ordered)

# =============================================================================
# lib/metadata_store.py - Metadata Store Client
# =============================================================================
# Wraps the table where the external analysis pipeline writes one document
# per analysed file. Documents are keyed loosely by `fileName`, which equals
# the storage key of the analysed object. Nothing enforces uniqueness.
#
# This application only reads and deletes documents; it never writes them.
#
# Usage:
#   store = SupabaseMetadataStore(SupabaseClient.get_client(), "media_metadata")
#   doc = store.find_one("fileName", "1718000000000-cat.jpg")
# =============================================================================

from __future__ import annotations

import logging
from typing import Any, Protocol

from supabase import Client

from lib.supabase_client import SupabaseClientError

logger = logging.getLogger(__name__)

# PostgREST caps responses (1000 rows by default), so snapshots are paged
SNAPSHOT_PAGE_SIZE = 1000


class MetadataStore(Protocol):
    """Operations the application needs from the metadata store."""

    def find_one(self, field: str, value: str) -> dict[str, Any] | None: ...

    def get_all(self) -> list[dict[str, Any]]: ...

    def count(self) -> int: ...

    def delete(self, doc_id: Any) -> None: ...


class SupabaseMetadataStore:
    """
    Metadata store backed by a Supabase (PostgREST) table.

    Column names follow the analysis pipeline's document shape
    (`fileName`, `tags`, `object_tags`, `transcription`, `extractedText`,
    `topics`, `scenes`, `uploadTime`, `processedAt`).
    """

    def __init__(self, client: Client, table: str):
        self.client = client
        self.table = table

    def find_one(self, field: str, value: str) -> dict[str, Any] | None:
        """Return the first document whose `field` equals `value`, or None."""
        try:
            response = (
                self.client.table(self.table)
                .select("*")
                .eq(field, value)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to query metadata: {e}",
                code="QUERY_FAILED",
                suggestion=f"Check that table '{self.table}' has a '{field}' column",
                details={"field": field, "value": value},
            )

        rows = response.data or []
        return rows[0] if rows else None

    def get_all(self) -> list[dict[str, Any]]:
        """Fetch the whole table, page by page."""
        documents: list[dict[str, Any]] = []
        start = 0

        try:
            while True:
                response = (
                    self.client.table(self.table)
                    .select("*")
                    .range(start, start + SNAPSHOT_PAGE_SIZE - 1)
                    .execute()
                )
                page = response.data or []
                documents.extend(page)
                if len(page) < SNAPSHOT_PAGE_SIZE:
                    break
                start += SNAPSHOT_PAGE_SIZE

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch metadata snapshot: {e}",
                code="SNAPSHOT_FAILED",
                suggestion=f"Check that table '{self.table}' exists and is readable",
                details={"table": self.table, "offset": start},
            )

        logger.debug(f"Fetched {len(documents)} metadata documents from {self.table}")
        return documents

    def count(self) -> int:
        """Number of documents in the table."""
        try:
            response = (
                self.client.table(self.table)
                .select("id", count="exact")
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to count metadata documents: {e}",
                code="COUNT_FAILED",
                details={"table": self.table},
            )
        return response.count or 0

    def delete(self, doc_id: Any) -> None:
        """Delete one document by its primary key."""
        try:
            self.client.table(self.table).delete().eq("id", doc_id).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete metadata document: {e}",
                code="DELETE_FAILED",
                details={"id": doc_id},
            )

# =============================================================================
# tests/test_file_service.py - Single-File Operation Tests
# =============================================================================
# This module contains tests for:
# - File detail with a fresh 1-hour link
# - Download
# - Best-effort delete across both stores
# - Metadata lookup, fallback, and not-found debug context
# =============================================================================

from datetime import datetime, timezone

import pytest

from app.exceptions import (
    FileFetchError,
    FileNotFoundInStorageError,
    MetadataLookupError,
    StorageDownloadError,
)
from core.services.file_service import FileService, normalize_document
from lib.supabase_client import SupabaseClientError


@pytest.fixture
def service(object_store, metadata_store, clock):
    return FileService(object_store, metadata_store, clock=clock)


# =============================================================================
# Detail
# =============================================================================

class TestGetFile:
    def test_with_metadata(self, service, object_store, metadata_store):
        object_store.add("k1", original_name="beach.jpg")
        metadata_store.add("k1", tags=["sunset"], topics=["travel"])

        file = service.get_file("k1")

        assert file.name == "beach.jpg"
        assert file.has_metadata is True
        assert file.status == "completed"
        assert file.ai_analysis.topics == ["travel"]
        assert object_store.signed == [("k1", 3600)]

    def test_without_metadata(self, service, object_store):
        object_store.add("k1")

        file = service.get_file("k1")

        assert file.has_metadata is False
        assert file.ai_analysis is None

    def test_metadata_failure_degrades(self, service, object_store, metadata_store):
        object_store.add("k1")
        metadata_store.fail_queries = True

        assert service.get_file("k1").has_metadata is False

    def test_missing_object(self, service):
        with pytest.raises(FileNotFoundInStorageError) as exc_info:
            service.get_file("nope")
        assert exc_info.value.status_code == 404

    def test_storage_failure(self, service, object_store):
        object_store.add("k1")
        object_store.broken.add("k1")

        with pytest.raises(FileFetchError):
            service.get_file("k1")


# =============================================================================
# Download
# =============================================================================

class TestDownload:
    def test_returns_object_and_bytes(self, service, object_store):
        object_store.add("k1", original_name="a b.png", data=b"\x89PNG")

        obj, data = service.download("k1")

        assert obj.display_name == "a b.png"
        assert data == b"\x89PNG"

    def test_missing(self, service):
        with pytest.raises(FileNotFoundInStorageError):
            service.download("nope")

    def test_storage_failure(self, service, object_store):
        object_store.add("k1")
        object_store.broken.add("k1")

        with pytest.raises(StorageDownloadError):
            service.download("k1")


# =============================================================================
# Delete
# =============================================================================

class TestDelete:
    def test_removes_object_and_metadata(self, service, object_store, metadata_store):
        object_store.add("k1")
        doc = metadata_store.add("k1", tags=["x"])

        service.delete("k1")

        assert "k1" not in object_store.objects
        assert metadata_store.deleted == [doc["id"]]

    def test_nonexistent_succeeds(self, service, metadata_store):
        service.delete("never-uploaded")
        assert metadata_store.deleted == []

    def test_metadata_removed_even_if_object_gone(self, service, metadata_store):
        doc = metadata_store.add("k1")

        service.delete("k1")

        assert metadata_store.deleted == [doc["id"]]

    def test_metadata_failure_tolerated(self, service, object_store, metadata_store):
        object_store.add("k1")
        metadata_store.fail_queries = True

        service.delete("k1")

        assert "k1" not in object_store.objects

    def test_only_first_match_removed(self, service, metadata_store):
        first = metadata_store.add("k1")
        second = metadata_store.add("k1")

        service.delete("k1")

        assert metadata_store.deleted == [first["id"]]
        assert metadata_store.documents == [second]


# =============================================================================
# Metadata Lookup
# =============================================================================

class TestLookupMetadata:
    def test_found(self, service, object_store, metadata_store, sample_metadata_doc):
        metadata_store.documents.append(sample_metadata_doc)
        object_store.add(sample_metadata_doc["fileName"], content_type="image/jpeg")

        result = service.lookup_metadata(sample_metadata_doc["fileName"])

        assert result["success"] is True
        assert result["metadata"]["id"] == "doc-sunset"
        assert result["metadata"]["tags"] == ["sunset", "beach", "ocean"]
        assert result["metadata"]["isComplete"] is True
        assert result["metadata"]["missingFields"] == []

    def test_partial_analysis(self, service, object_store, metadata_store):
        object_store.add("k1", content_type="audio/mpeg")
        metadata_store.add("k1", topics=["music"])

        metadata = service.lookup_metadata("k1")["metadata"]

        assert metadata["isComplete"] is False
        assert metadata["missingFields"] == ["transcription"]

    def test_falls_back_to_original_name(self, service, metadata_store):
        metadata_store.add("1718020800000-cat.jpg", originalName="cat.jpg", fileType="image")

        result = service.lookup_metadata("cat.jpg")

        assert result["success"] is True
        assert result["metadata"]["fileName"] == "1718020800000-cat.jpg"

    def test_not_found_carries_debug(self, service, metadata_store):
        metadata_store.add("other-1")
        metadata_store.add("other-2")

        result = service.lookup_metadata("1718020800000-missing.jpg")

        assert result == {
            "success": False,
            "error": "Metadata not found",
            "metadata": None,
            "debug": {
                "searchedFileName": "1718020800000-missing.jpg",
                "totalDocuments": 2,
            },
        }

    def test_table_without_original_name_column(self, service, metadata_store):
        metadata_store.add("other-1")
        metadata_store.missing_columns.add("originalName")

        result = service.lookup_metadata("1718020800000-missing.jpg")

        assert result["success"] is False
        assert result["metadata"] is None
        assert result["debug"] == {
            "searchedFileName": "1718020800000-missing.jpg",
            "totalDocuments": 1,
        }

    def test_hit_does_not_need_original_name_column(self, service, metadata_store):
        metadata_store.add("k1", fileType="unknown")
        metadata_store.missing_columns.add("originalName")

        assert service.lookup_metadata("k1")["success"] is True

    def test_store_failure(self, service, metadata_store):
        metadata_store.fail_queries = True

        with pytest.raises(MetadataLookupError) as exc_info:
            service.lookup_metadata("k1")
        assert exc_info.value.to_dict()["metadata"] is None

    def test_timestamps_are_serialized(self, service, metadata_store):
        metadata_store.add(
            "k1",
            fileType="unknown",
            processedAt=datetime(2024, 6, 10, 12, 5, tzinfo=timezone.utc),
        )

        metadata = service.lookup_metadata("k1")["metadata"]

        assert metadata["processedAt"] == "2024-06-10T12:05:00+00:00"


def test_normalize_document_recurses():
    stamp = datetime(2024, 1, 1, tzinfo=timezone.utc)
    doc = {"a": stamp, "scenes": [{"start": stamp, "label": "intro"}], "n": 3}

    assert normalize_document(doc) == {
        "a": "2024-01-01T00:00:00+00:00",
        "scenes": [{"start": "2024-01-01T00:00:00+00:00", "label": "intro"}],
        "n": 3,
    }


def test_store_errors_are_supabase_errors(object_store):
    """The fakes raise the same error family as the real adapters."""
    object_store.broken.add("k")
    with pytest.raises(SupabaseClientError):
        object_store.get_metadata("k")

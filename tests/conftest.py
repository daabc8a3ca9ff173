# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - In-memory fakes for the object store and the metadata store
# - A TestClient wired to those fakes through dependency overrides
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from lib.object_store import ObjectNotFoundError, StoredObject
from lib.supabase_client import SupabaseClientError

NOW = datetime(2024, 6, 10, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Fakes
# =============================================================================

class FakeObjectStore:
    """In-memory ObjectStore keeping objects in insertion order."""

    def __init__(self):
        self.objects: dict[str, StoredObject] = {}
        self.blobs: dict[str, bytes] = {}
        self.saved: list[dict[str, Any]] = []
        self.signed: list[tuple[str, int]] = []
        self.broken: set[str] = set()
        self.fail_list = False

    def add(
        self,
        name: str,
        content_type: str = "image/jpeg",
        created_at: datetime = NOW,
        original_name: str | None = None,
        data: bytes = b"data",
    ) -> StoredObject:
        obj = StoredObject(
            name=name,
            content_type=content_type,
            size=len(data),
            created_at=created_at,
            original_name=original_name,
        )
        self.objects[name] = obj
        self.blobs[name] = data
        return obj

    def save(self, name, data, content_type, metadata):
        self.saved.append({
            "name": name,
            "content_type": content_type,
            "metadata": metadata,
        })
        self.objects[name] = StoredObject(
            name=name,
            content_type=content_type,
            size=len(data),
            created_at=datetime.now(timezone.utc),
            original_name=metadata.get("originalName"),
            uploaded_at=metadata.get("uploadedAt"),
        )
        self.blobs[name] = data

    def get_metadata(self, name):
        if name in self.broken:
            raise SupabaseClientError("storage timeout", code="GET_METADATA_FAILED")
        if name not in self.objects:
            raise ObjectNotFoundError(name)
        return self.objects[name]

    def signed_url(self, name, expires_in):
        self.signed.append((name, expires_in))
        return f"https://signed.test/{name}?expires={expires_in}"

    def public_url(self, name):
        return f"https://public.test/media/{name}"

    def download(self, name):
        if name not in self.blobs:
            raise ObjectNotFoundError(name)
        return self.blobs[name]

    def delete(self, name):
        if name not in self.objects:
            raise ObjectNotFoundError(name)
        del self.objects[name]
        del self.blobs[name]

    def list_names(self):
        if self.fail_list:
            raise SupabaseClientError("bucket unreachable", code="LIST_FAILED")
        return list(self.objects)


class FakeMetadataStore:
    """In-memory MetadataStore over a list of documents."""

    def __init__(self, documents: list[dict[str, Any]] | None = None):
        self.documents: list[dict[str, Any]] = list(documents or [])
        self.deleted: list[Any] = []
        self.fail_snapshot = False
        self.fail_queries = False
        # Columns the table does not have; filtering on them fails
        self.missing_columns: set[str] = set()
        self._next_id = len(self.documents) + 1

    def add(self, file_name: str, **fields) -> dict[str, Any]:
        doc = {"id": f"doc-{self._next_id}", "fileName": file_name, **fields}
        self._next_id += 1
        self.documents.append(doc)
        return doc

    def find_one(self, field, value):
        if self.fail_queries:
            raise SupabaseClientError("database unreachable", code="QUERY_FAILED")
        if field in self.missing_columns:
            raise SupabaseClientError(f"column media_metadata.{field} does not exist", code="QUERY_FAILED")
        for doc in self.documents:
            if doc.get(field) == value:
                return doc
        return None

    def get_all(self):
        if self.fail_snapshot:
            raise SupabaseClientError("database unreachable", code="SNAPSHOT_FAILED")
        return list(self.documents)

    def count(self):
        return len(self.documents)

    def delete(self, doc_id):
        self.deleted.append(doc_id)
        self.documents = [d for d in self.documents if d.get("id") != doc_id]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def object_store():
    return FakeObjectStore()


@pytest.fixture
def metadata_store():
    return FakeMetadataStore()


@pytest.fixture
def clock():
    """Fixed clock at NOW."""
    return lambda: NOW


@pytest.fixture
def minutes_ago():
    """Build a creation time relative to NOW."""
    def _minutes_ago(minutes: float) -> datetime:
        return NOW - timedelta(minutes=minutes)
    return _minutes_ago


@pytest.fixture
def client(object_store, metadata_store):
    """TestClient with both stores replaced by the in-memory fakes."""
    from fastapi.testclient import TestClient

    from app.dependencies import get_metadata_store, get_object_store
    from app.main import app

    app.dependency_overrides[get_object_store] = lambda: object_store
    app.dependency_overrides[get_metadata_store] = lambda: metadata_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_metadata_doc():
    """A complete metadata document for an image, as the pipeline writes it."""
    return {
        "id": "doc-sunset",
        "fileName": "1718020800000-beach.jpg",
        "tags": ["sunset", "beach", "ocean"],
        "object_tags": ["person", "umbrella"],
        "topics": ["travel"],
        "extractedText": "",
        "uploadTime": "2024-06-10T12:00:00Z",
        "processedAt": "2024-06-10T12:03:12Z",
    }

# =============================================================================
# lib/ - Store Clients
# =============================================================================
# This package wraps the external stores:
# - supabase_client.py: shared Supabase connection and error type
# - object_store.py: Storage bucket holding the media bytes
# - metadata_store.py: table holding the AI analysis documents
#
# Each store is a Protocol plus a Supabase implementation, so tests can
# substitute in-memory fakes.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.object_store import ObjectNotFoundError, ObjectStore, StoredObject, SupabaseObjectStore
from lib.metadata_store import MetadataStore, SupabaseMetadataStore

__all__ = [
    "SupabaseClient",
    "SupabaseClientError",
    "ObjectNotFoundError",
    "ObjectStore",
    "StoredObject",
    "SupabaseObjectStore",
    "MetadataStore",
    "SupabaseMetadataStore",
]

# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the MediaVault API:
# - test_models.py: file kinds, AI analysis projection, completeness checks
# - test_reconciliation.py: bucket/metadata join and status classification
# - test_upload.py: upload validation and storage key derivation
# - test_query.py: filter, search, sort and pagination
# - test_file_service.py: detail, download, delete and metadata lookup
# - test_stores.py: Supabase store adapters against a mocked client
# - test_api.py: HTTP endpoints through TestClient
#
# Run tests with: pytest
# =============================================================================

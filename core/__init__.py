# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the media library logic:
# - models/: Pydantic schemas for files, AI analysis and responses
# - services/: reconciliation, upload, query and single-file operations
#
# Services receive store handles explicitly; they raise app.exceptions
# errors but do not otherwise depend on FastAPI.
# =============================================================================

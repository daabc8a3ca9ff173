# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.STORAGE_BUCKET)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # Backs both the object store (Storage bucket) and the metadata store
    # (PostgREST table populated by the analysis pipeline)

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    STORAGE_BUCKET: str = Field(
        default="media",
        description="Storage bucket holding uploaded media files"
    )

    METADATA_TABLE: str = Field(
        default="media_metadata",
        description="Table where the analysis pipeline writes AI metadata"
    )

    # -------------------------------------------------------------------------
    # External Search Function
    # -------------------------------------------------------------------------

    SEARCH_FUNCTION_URL: str = Field(
        default="https://us-central1-your-project.cloudfunctions.net/searchFiles",
        description="URL of the external search function proxied by /api/search"
    )

    SEARCH_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for the search proxy request"
    )

    # -------------------------------------------------------------------------
    # Media Library Settings
    # -------------------------------------------------------------------------

    MAX_UPLOAD_SIZE_MB: int = Field(
        default=100,
        ge=1,
        le=1024,
        description="Maximum file upload size in MB"
    )

    PROCESSING_THRESHOLD_MINUTES: int = Field(
        default=10,
        ge=0,
        description="Minutes without metadata after which a file counts as processing"
    )

    LIST_URL_EXPIRY_SECONDS: int = Field(
        default=24 * 60 * 60,
        ge=1,
        description="Validity of signed download links in listings and upload responses"
    )

    DETAIL_URL_EXPIRY_SECONDS: int = Field(
        default=60 * 60,
        ge=1,
        description="Validity of signed download links in the file detail view"
    )

    RECONCILE_MAX_WORKERS: int = Field(
        default=8,
        ge=1,
        le=64,
        description="Threads used to fetch per-file object metadata and signed links"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # Don't fail if .env doesn't exist (production sets env vars directly)
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def max_upload_size_bytes(self) -> int:
        """Convert MB to bytes for file size validation."""
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()

# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.GITHUB_REPO)
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

    Values are read once at startup. Services never import this module
    directly; the container in app.dependencies hands them the values
    they need.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration (partner documents)
    # -------------------------------------------------------------------------

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    # -------------------------------------------------------------------------
    # Remote Content Repository (GitHub Contents API)
    # -------------------------------------------------------------------------

    GITHUB_TOKEN: str = Field(
        ...,
        description="Token with contents:write on GITHUB_REPO"
    )

    GITHUB_REPO: str = Field(
        ...,
        pattern=r"^[A-Za-z0-9._-]+/[A-Za-z0-9._-]+$",
        description="Repository holding media, as owner/name"
    )

    GITHUB_BRANCH: str = Field(
        default="main",
        description="Branch that media commits are written to"
    )

    GITHUB_API_BASE: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL"
    )

    GITHUB_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for a single content repository call"
    )

    UPLOAD_CONCURRENCY: int = Field(
        default=4,
        ge=1,
        le=16,
        description="Max concurrent uploads within one batch"
    )

    # -------------------------------------------------------------------------
    # Image Upload Limits
    # -------------------------------------------------------------------------

    MAX_IMAGE_SIZE_MB: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum size of a single image in MB"
    )

    MAX_BATCH_IMAGES: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum number of images in one portfolio upload"
    )

    # -------------------------------------------------------------------------
    # Directory Search
    # -------------------------------------------------------------------------

    DEFAULT_SEARCH_RADIUS_M: int = Field(
        default=10000,
        ge=1,
        description="Radius used by nearby search when none is given"
    )

    DEFAULT_RESULT_LIMIT: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Result cap for category and service-name search"
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

    # -------------------------------------------------------------------------
    # Security
    # -------------------------------------------------------------------------

    JWT_SECRET: str = Field(
        default="dev-secret-key-change-in-production",
        min_length=16,
        description="HS256 secret used to verify partner bearer tokens"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
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
    def max_image_size_bytes(self) -> int:
        """Convert MB to bytes for file size validation."""
        return self.MAX_IMAGE_SIZE_MB * 1024 * 1024

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

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()

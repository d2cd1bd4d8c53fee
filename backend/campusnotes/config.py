"""
CampusNotes Backend — Application Configuration
================================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by the app factory, the services and the middleware.
When:  Loaded once at module import time; validated before the app starts.
"""

from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

# Default location of the notes file: next to the package code, so the store
# always resolves the same file regardless of the working directory.
DEFAULT_STORE_PATH = Path(__file__).resolve().parent / "data" / "notes-data.json"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for development. Production
    deployments MUST provide the Cloudinary credentials.
    """

    # ── Cloudinary (blob storage) ─────────────────────────────────────────
    # What: Account credentials for the remote object store holding file bytes
    # How to obtain: Cloudinary console → Dashboard → API Keys
    cloudinary_cloud_name: str = Field(default="", description="Cloudinary cloud name")
    cloudinary_api_key: str = Field(default="", description="Cloudinary API key")
    cloudinary_api_secret: str = Field(default="", description="Cloudinary API secret")

    # What: Top-level folder for uploads; notes land in <folder>/<type>s
    blob_folder: str = Field(default="campusnotes")

    # ── Record Store ──────────────────────────────────────────────────────
    # What: JSON file mirroring the in-memory note collection
    notes_store_path: str = Field(default=str(DEFAULT_STORE_PATH))

    # What: Maximum accepted upload size in bytes
    # Default: 50MB = 50 * 1024 * 1024 = 52428800
    # Valid range: 1MB to 100MB
    max_upload_size: int = Field(default=52_428_800, ge=1_048_576, le=104_857_600)

    # ── CORS ──────────────────────────────────────────────────────────────
    # What: Allowed origins for cross-origin requests
    # Format: Comma-separated URLs, or "*" for any origin
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=5000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # NOTES_STORE_PATH and notes_store_path both work
        "extra": "ignore",
    }

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that critical settings are configured.
        When:  Called during app startup (lifespan).
        How:   Collects every missing value and raises a single ValueError.
        """
        errors = []
        if not self.cloudinary_cloud_name:
            errors.append("CLOUDINARY_CLOUD_NAME is not set.")
        if not self.cloudinary_api_key or not self.cloudinary_api_secret:
            errors.append(
                "CLOUDINARY_API_KEY / CLOUDINARY_API_SECRET are not set. "
                "Uploads and remote deletes will fail until they are configured."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()

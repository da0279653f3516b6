# This project was developed with assistance from AI tools.
"""
Application configuration.

All settings read from environment variables with sensible local dev defaults.
Settings are grouped by concern: app, feature gate, auth, storage, upload
policy, license catalog and event delivery.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve project root .env regardless of CWD
_PROJECT_ROOT = Path(__file__).resolve().parents[2]
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Application settings -- single source of truth for env-driven config."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -- App --
    APP_NAME: str = "permit-applications"
    APP_ENV: str = Field(
        default="local",
        description="Deployment environment. Catalog fallback data is only served outside 'production'.",
    )

    # -- Feature gate --
    PERMOHONAN_ENABLED: bool = Field(
        default=True,
        description="When False every application and catalog endpoint answers 404.",
    )

    # -- CORS --
    ALLOWED_HOSTS: list[str] = ["http://localhost:5173"]

    # -- Auth --
    AUTH_DISABLED: bool = Field(
        default=False,
        description="Bypass JWT validation. Set True for tests and local dev without Keycloak.",
    )
    KEYCLOAK_URL: str = "http://localhost:8080"
    KEYCLOAK_REALM: str = "permits"
    JWKS_CACHE_TTL: int = Field(
        default=300,
        description="JWKS cache lifetime in seconds (default 5 minutes).",
    )

    # -- Storage (S3 / MinIO) --
    S3_ENDPOINT: str = "http://localhost:9090"
    S3_ACCESS_KEY: str = "minio"
    S3_SECRET_KEY: str = "miniosecret"
    S3_BUCKET: str = "permohonan-dokumen"
    S3_REGION: str = "us-east-1"

    # -- Upload policy --
    MAX_UPLOAD_SIZE: int = Field(
        default=10 * 1024 * 1024,
        description="Byte ceiling for a single uploaded document.",
    )
    ALLOWED_EXTENSIONS: list[str] = ["pdf", "jpg", "jpeg", "png"]
    ALLOWED_CONTENT_TYPES: list[str] = ["application/pdf", "image/jpeg", "image/png"]
    FILE_INTEGRITY_HASH_ENABLED: bool = Field(
        default=False,
        description="Store a SHA-256 digest of each uploaded file.",
    )

    # -- License catalog --
    LICENSE_CATALOG_URL: str = Field(
        default="http://localhost:8004/api",
        description="Base URL of the license catalog (license types + document requirements).",
    )
    CATALOG_CACHE_TTL: int = Field(
        default=900,
        description="Catalog response cache lifetime in seconds (default 15 minutes).",
    )
    CATALOG_TIMEOUT: float = 10.0

    # -- Downstream review queue --
    REVIEW_QUEUE_URL: str | None = Field(
        default=None,
        description="When set, submitted applications are forwarded to this review queue.",
    )
    REVIEW_QUEUE_TIMEOUT: float = 10.0

    # -- Audit --
    AUDIT_MAX_ATTEMPTS: int = Field(
        default=3,
        description="Attempts per audit event before it is logged as lost.",
    )


settings = Settings()

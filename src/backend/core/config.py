"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables or a local .env file.
"""

from functools import lru_cache
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Constituency Connect API"
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"  # console or json

    # Authentication
    SECRET_KEY: str = ""  # Required - signs access tokens
    REFRESH_SECRET_KEY: str = ""  # Required - signs refresh tokens
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    BCRYPT_ROUNDS: int = 10

    # Representatives must register with an address under this domain
    REPRESENTATIVE_EMAIL_DOMAIN: str = "@na.gov.pk"

    @field_validator("SECRET_KEY", "REFRESH_SECRET_KEY")
    @classmethod
    def validate_required_secrets(cls, v: str, info: Any) -> str:
        """Validate that required secrets are set."""
        if not v:
            raise ValueError(f"{info.field_name} must be set in environment")
        return v

    # Azure Cosmos DB
    AZURE_COSMOS_ENDPOINT: str | None = None
    AZURE_COSMOS_CONNECTION_STRING: str | None = None  # For local emulator only
    AZURE_COSMOS_DATABASE: str = "constituency-connect"
    AZURE_COSMOS_DISABLE_SSL: bool = False
    AZURE_COSMOS_TIMEOUT_SECONDS: int = 10

    # Complaint attachments
    UPLOAD_DIR: str = "uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_COMPLAINT_ATTACHMENTS: int = 3
    MAX_ATTACHMENT_BYTES: int = 5 * 1024 * 1024
    ALLOWED_ATTACHMENT_TYPES: str = "image/jpeg,image/png,image/gif,image/webp,application/pdf"

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Real-time channel
    REALTIME_AUTH_TIMEOUT_SECONDS: float = 10.0

    # CORS - stored as comma-separated string to avoid pydantic-settings JSON parsing issues
    CORS_ORIGINS: str = "http://localhost:3000"

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        import json

        try:
            return json.loads(self.CORS_ORIGINS)
        except json.JSONDecodeError:
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def allowed_attachment_types(self) -> set[str]:
        """Get the accepted attachment MIME types as a set."""
        return {t.strip().lower() for t in self.ALLOWED_ATTACHMENT_TYPES.split(",") if t.strip()}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()

"""
Application configuration using Pydantic Settings.
"""

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",
    )

    # Application
    ENVIRONMENT: str = Field(default="development", description="Environment name")
    DEBUG: bool = Field(default=False, description="Debug mode")

    # Server
    HOST: str = Field(default="0.0.0.0", description="Server host")
    PORT: int = Field(default=8000, description="Server port")

    # Database
    DATABASE_URL: str = Field(..., description="PostgreSQL connection string")
    AUTO_CREATE_TABLES: bool = Field(
        default=True, description="Create missing tables on startup"
    )

    # Inngest
    INNGEST_APP_ID: str = Field(default="catalog-sync", description="Inngest app ID")
    INNGEST_EVENT_KEY: Optional[str] = Field(default=None, description="Inngest event key")
    INNGEST_SIGNING_KEY: Optional[str] = Field(default=None, description="Inngest signing key")

    # CORS
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        description="Allowed CORS origins (comma-separated)",
    )

    # Product feed
    FEED_URL: str = Field(
        default="https://famme.no/products.json",
        description="External product feed URL",
    )
    FEED_TIMEOUT_SECONDS: int = Field(default=30, description="Feed request timeout (seconds)")

    # Catalog sync
    CATALOG_MAX_PRODUCTS: int = Field(
        default=50, ge=0, description="Maximum number of products kept in the catalog"
    )
    CATALOG_SYNC_CRON: str = Field(
        default="0 * * * *", description="Cron schedule for the catalog sync"
    )
    CATALOG_SYNC_ON_STARTUP: bool = Field(
        default=True, description="Run one catalog sync when the application starts"
    )

    # Pagination
    DEFAULT_PAGE_SIZE: int = Field(default=10, ge=1, description="Default page size")
    MAX_PAGE_SIZE: int = Field(default=50, ge=1, description="Maximum page size")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: str = Field(default="json", description="Log format (json or text)")

    @field_validator("CORS_ORIGINS")
    @classmethod
    def parse_cors_origins(cls, v: str) -> List[str]:
        """Parse comma-separated CORS origins into list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v_upper

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        v_lower = v.lower()
        if v_lower not in {"json", "text"}:
            raise ValueError("LOG_FORMAT must be 'json' or 'text'")
        return v_lower

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT.lower() == "development"


# Global settings instance
settings = Settings()

"""
Application Configuration - Pydantic Settings for type-safe config.

FAIL FAST - Critical config is validated at startup.
"""

import sys

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when critical configuration is missing or invalid."""

    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database Configuration - NO DEFAULT for production safety
    database_url: str = ""
    database_read_url: str | None = None  # Optional read replica
    database_pool_size: int = 10
    database_max_overflow: int = 10
    database_pool_timeout: int = 30
    database_pool_recycle: int = 3600
    run_migrations_on_startup: bool = False

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_title: str = "AI Tool Directory API"
    api_version: str = "1.0.0"
    api_description: str = "Internal directory of AI tools, categories, roles and tags"

    # Surfaces exception text on 500 responses when enabled
    debug: bool = False

    # Authentication
    jwt_secret: str = ""  # generate with: openssl rand -hex 32
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24

    # CORS
    cors_allowed_origins: str = "http://localhost:3000,http://localhost:3001"
    cors_allow_credentials: bool = True
    cors_allowed_methods: str = "GET,POST,PUT,PATCH,DELETE,OPTIONS"
    cors_allowed_headers: str = (
        "Accept,Authorization,Content-Type,X-Requested-With,X-CSRF-TOKEN,X-Request-ID"
    )

    @property
    def allowed_origins(self) -> list[str]:
        """Get list of origins allowed to make cross-origin requests."""
        return _split_csv(self.cors_allowed_origins)

    @property
    def allowed_methods(self) -> list[str]:
        """Get list of HTTP methods allowed for cross-origin requests."""
        return [method.upper() for method in _split_csv(self.cors_allowed_methods)]

    @property
    def allowed_headers(self) -> list[str]:
        """Get list of request headers allowed for cross-origin requests."""
        return _split_csv(self.cors_allowed_headers)

    # Pagination
    default_per_page: int = 15
    max_per_page: int = 100

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # json or console

    # Observability - Metrics
    metrics_enabled: bool = True

    # Observability - Tracing
    tracing_enabled: bool = False
    otlp_endpoint: str = "http://otel-collector:4317"
    otlp_insecure: bool = True
    service_name: str = "ai-tool-directory-api"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_critical_config(self) -> "Settings":
        """
        FAIL FAST: Validate critical configuration at startup.

        The app MUST NOT start if critical config is missing.
        """
        errors: list[str] = []

        if not self.database_url:
            errors.append("DATABASE_URL is required but empty or missing")
        elif not self.database_url.startswith(("postgresql", "postgres", "sqlite")):
            errors.append(
                f"DATABASE_URL must be a PostgreSQL or SQLite URL, got: {self.database_url[:20]}..."
            )

        if not self.jwt_secret:
            errors.append("JWT_SECRET is required but empty or missing")

        if self.jwt_expire_hours <= 0:
            errors.append(f"JWT_EXPIRE_HOURS must be positive, got: {self.jwt_expire_hours}")

        if not 1 <= self.default_per_page <= self.max_per_page:
            errors.append(
                f"DEFAULT_PER_PAGE must be between 1 and MAX_PER_PAGE ({self.max_per_page})"
            )

        if errors:
            error_msg = "\n".join(
                [
                    "",
                    "=" * 60,
                    "CRITICAL CONFIGURATION ERROR - APPLICATION CANNOT START",
                    "=" * 60,
                    *[f"  ✗ {e}" for e in errors],
                    "=" * 60,
                    "",
                ]
            )
            print(error_msg, file=sys.stderr)
            raise ConfigurationError(error_msg)

        return self

    @property
    def read_database_url(self) -> str:
        """Get read database URL (fallback to primary if no replica)."""
        return self.database_read_url or self.database_url

    @property
    def is_sqlite(self) -> bool:
        """Whether the primary database is SQLite (local development and tests)."""
        return self.database_url.startswith("sqlite")


def _split_csv(value: str) -> list[str]:
    items: list[str] = []
    for item in value.split(","):
        item = item.strip()
        if item and item not in items:
            items.append(item)
    return items


# Global settings instance - validates at import time
settings = Settings()


def get_settings() -> Settings:
    """Get application settings instance."""
    return settings

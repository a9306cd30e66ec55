"""Application configuration using Pydantic Settings.

This module provides centralized configuration management with environment
variable validation, type coercion, and default values.

Two layers are exposed:
- ``Settings``: process-wide settings read from the environment / ``.env``
- ``DiscoveryConfig``: the immutable slice of settings handed to the
  client-side discovery core at construction time
"""

from enum import Enum
from functools import lru_cache

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log format options."""

    JSON = "json"
    CONSOLE = "console"


class Settings(BaseSettings):
    """Application settings with environment variable validation.

    All settings can be overridden via environment variables.
    The TMDB token should be provided via environment variables or .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # ========================================
    # Application
    # ========================================
    app_env: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    app_name: str = Field(
        default="MovieFinder",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )
    log_format: LogFormat = Field(
        default=LogFormat.CONSOLE,
        description="Log output format (json for production, console for dev)",
    )

    # ========================================
    # Server
    # ========================================
    host: str = Field(
        default="0.0.0.0",
        description="Server host",
    )
    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Server port",
    )

    # ========================================
    # Redis (search analytics)
    # ========================================
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for search analytics",
    )

    # ========================================
    # TMDB Catalog
    # ========================================
    tmdb_base_url: str = Field(
        default="https://api.themoviedb.org/3",
        description="Upstream TMDB API base URL",
    )
    tmdb_token: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("tmdb_token", "vite_tmdb_token"),
        description="TMDB v4 read access token (bearer credential)",
    )
    catalog_proxy_prefix: str = Field(
        default="/api/catalog",
        description="Path prefix the catalog proxy is mounted under",
    )
    catalog_proxy_url: str = Field(
        default="http://localhost:8000/api/catalog",
        description="Base URL the discovery client uses to reach the catalog proxy",
    )
    cors_relay_url: str = Field(
        default="https://corsproxy.io/?",
        description="CORS-relaxing relay prefix used as the detail fetch fallback",
    )
    analytics_url: str = Field(
        default="http://localhost:8000/api/v1/analytics",
        description="Base URL of the search analytics API",
    )

    # ========================================
    # Discovery client
    # ========================================
    request_timeout: float = Field(
        default=10.0,
        gt=0,
        description="List/detail request timeout in seconds",
    )
    debounce_ms: int = Field(
        default=500,
        ge=0,
        description="Search input quiescence window in milliseconds",
    )
    trending_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Number of trending searches to show",
    )

    # ========================================
    # Derived Properties
    # ========================================
    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == Environment.PRODUCTION

    @property
    def use_json_logs(self) -> bool:
        """Check if JSON logging should be used."""
        return self.log_format == LogFormat.JSON or self.is_production

    @property
    def has_tmdb_token(self) -> bool:
        """Check if the upstream credential is configured."""
        return bool(self.tmdb_token.get_secret_value())


class DiscoveryConfig(BaseModel):
    """Immutable configuration for one discovery session.

    Built once per session (usually via ``from_settings``) and passed into
    the orchestrator, detail fetcher and debouncer. Nothing in the core reads
    module-level configuration.
    """

    model_config = ConfigDict(frozen=True)

    catalog_base_url: str
    upstream_base_url: str = "https://api.themoviedb.org/3"
    cors_relay_url: str = "https://corsproxy.io/?"
    analytics_url: str | None = None
    credential: SecretStr | None = None
    request_timeout: float = Field(default=10.0, gt=0)
    debounce_window: float = Field(default=0.5, ge=0)
    trending_limit: int = Field(default=5, ge=1)

    @property
    def has_credential(self) -> bool:
        """Check if a client-held credential is available for direct calls."""
        return self.credential is not None and bool(
            self.credential.get_secret_value()
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "DiscoveryConfig":
        """Derive the session configuration from application settings."""
        return cls(
            catalog_base_url=settings.catalog_proxy_url,
            upstream_base_url=settings.tmdb_base_url,
            cors_relay_url=settings.cors_relay_url,
            analytics_url=settings.analytics_url,
            credential=settings.tmdb_token if settings.has_tmdb_token else None,
            request_timeout=settings.request_timeout,
            debounce_window=settings.debounce_ms / 1000,
            trending_limit=settings.trending_limit,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    This function is cached to avoid re-reading environment variables
    on every access. Use dependency injection in FastAPI routes.

    Returns:
        Settings: Application settings instance
    """
    return Settings()

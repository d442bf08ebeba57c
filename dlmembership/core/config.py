"""
Configuration management using Pydantic Settings.

This module provides type-safe, validated configuration loading from environment
variables. Settings are loaded once per process and treated as read-only;
components receive the values they need through explicit constructor
arguments (see `DirectoryConfig`), never by reading settings themselves.

Architecture:
- Flat Settings structure (no nesting)
- All config loaded from environment variables
- Type validation via Pydantic

Usage:
    from dlmembership.core.config import settings

    deadline = settings.invocation_deadline_seconds
    if settings.is_development:
        # Dev-specific behavior
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dlmembership.core.constants import DIRECTORY_TIMEOUT_DEFAULT
from dlmembership.core.enums import Environment


class Settings(BaseSettings):
    """
    Main application settings (flat structure).

    Configuration precedence:
        1. Environment variables
        2. Default values (only for non-sensitive config)
    """

    # Environment detection
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development, testing, ci, production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # Application metadata
    app_name: str = Field(
        default="DL Membership Webhook",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    api_base_url: str = Field(
        default="http://localhost:8000",
        description="Public base URL, used as the Problem Details type prefix",
    )
    api_v1_prefix: str = Field(
        default="/api/v1",
        description="API v1 route prefix",
    )

    # Directory service identity
    directory_tenant_id: str | None = Field(
        default=None,
        description="Directory tenant (GUID or verified domain)",
    )
    directory_client_id: str | None = Field(
        default=None,
        description="Application (client) ID registered in the tenant",
    )
    directory_authority_url: str = Field(
        default="https://login.microsoftonline.com",
        description="OAuth2 authority base URL",
    )
    directory_api_base_url: str = Field(
        default="https://graph.microsoft.com/v1.0",
        description="Directory API base URL",
    )
    directory_scope: str = Field(
        default="https://graph.microsoft.com/.default",
        description="Scope requested for the app-only access token",
    )
    directory_certificate_path: str | None = Field(
        default=None,
        description="Path to the PEM (certificate + key) or PFX credential",
    )
    directory_certificate_password: str | None = Field(
        default=None,
        description="Password for the PFX bundle or encrypted PEM key",
    )
    directory_timeout_seconds: float = Field(
        default=DIRECTORY_TIMEOUT_DEFAULT,
        gt=0,
        description="Per-request HTTP timeout for directory and token calls",
    )

    # Retry / backoff tuning
    session_max_attempts: int = Field(
        default=3,
        description="Attempts to establish a directory session on transient errors",
    )
    member_max_attempts: int = Field(
        default=3,
        description="Attempts per member operation on transient errors",
    )
    retry_base_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Initial backoff delay, doubled per attempt",
    )
    retry_max_delay_seconds: float = Field(
        default=8.0,
        ge=0,
        description="Upper bound for a single backoff delay",
    )
    session_max_total_wait_seconds: float = Field(
        default=15.0,
        ge=0,
        description="Upper bound for total backoff while establishing a session",
    )
    member_max_total_wait_seconds: float = Field(
        default=30.0,
        ge=0,
        description="Upper bound for total backoff spent on one member",
    )

    # Execution
    member_concurrency: int = Field(
        default=1,
        description="Members processed in parallel (1 = strictly sequential)",
    )
    invocation_deadline_seconds: float = Field(
        default=240.0,
        gt=0,
        description="Overall deadline for one webhook invocation",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator(
        "api_base_url",
        "directory_authority_url",
        "directory_api_base_url",
    )
    @classmethod
    def validate_url(cls, v: str) -> str:
        """
        Remove trailing slashes from URLs.

        Args:
            v: URL string.

        Returns:
            str: URL without trailing slash.
        """
        return v.rstrip("/")

    @field_validator("session_max_attempts", "member_max_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        """
        Validate attempt counts allow at least one call.

        Raises:
            ValueError: If attempts is below 1.
        """
        if v < 1:
            raise ValueError("max attempts must be at least 1")
        return v

    @field_validator("member_concurrency")
    @classmethod
    def validate_member_concurrency(cls, v: int) -> int:
        """
        Validate the worker pool stays small.

        Raises:
            ValueError: If concurrency is not between 1 and 16.
        """
        if not 1 <= v <= 16:
            raise ValueError("member_concurrency must be between 1 and 16")
        return v

    # Convenience properties for environment checks
    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == Environment.TESTING

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once per process.

    Returns:
        Settings: Cached settings instance.
    """
    return Settings()


# Global settings instance (singleton pattern)
settings = get_settings()

"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.cors import OriginPolicy


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Mode
    dev: bool = Field(
        default=False, description="Development mode: allow http://localhost origins"
    )

    # Application Configuration
    host: str = Field(default="0.0.0.0", description="Host to bind the server to")
    port: int = Field(default=3000, description="Port to run the server on")
    log_level: str = Field(default="INFO", description="Logging level")

    # Upstream
    upstream_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Per-phase (connect, read, write, pool) timeout in seconds for the Songlink API call",
    )

    # Feature Flags
    enable_telemetry: bool = Field(default=True, description="Enable PostHog telemetry")

    # PostHog Configuration
    posthog_api_key: str | None = Field(None, description="PostHog API key for telemetry")
    posthog_host: str = Field(default="https://us.i.posthog.com", description="PostHog host URL")

    # Sentry Configuration
    sentry_dsn: str | None = Field(None, description="Sentry DSN for error tracking")

    # Application Metadata
    app_name: str = Field(default="Songlink-CORS-Proxy", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")

    @field_validator("dev", mode="before")
    @classmethod
    def blank_dev_is_false(cls, value):
        # DEV= (set but empty) means production
        if isinstance(value, str) and not value.strip():
            return False
        return value

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def origin_policy(self) -> OriginPolicy:
        """Build the CORS origin policy for the configured mode."""
        return OriginPolicy.for_mode(dev=self.dev)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

"""Application settings with environment variable support."""

from __future__ import annotations

import functools
from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mongo_compare_indexes.config.exceptions import ConfigurationError

MONGO_URL_SCHEMES = ("mongodb://", "mongodb+srv://")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Endpoints
    source_mongo_url: str = Field(
        default="", description="Connection string for the source MongoDB database"
    )
    target_mongo_url: str = Field(
        default="", description="Connection string for the target MongoDB database"
    )
    mongo_default_database: str = Field(
        default="test",
        description="Database used when the connection string has no database path",
    )

    # Driver timeouts
    mongo_server_selection_timeout_ms: int = Field(
        default=5000, gt=0, description="serverSelectionTimeoutMS passed to the driver"
    )
    mongo_timeout_ms: int = Field(
        default=30000, gt=0, description="Client-side timeout for each operation (timeoutMS)"
    )

    # Comparison
    compare_max_concurrency: int = Field(
        default=8, ge=1, description="Maximum concurrent index listings per database"
    )
    compare_include_system_collections: bool = Field(
        default=False, description="Include system.* collections in snapshots"
    )
    compare_detect_divergent: bool = Field(
        default=True,
        description="Report indexes present on both sides with differing key shapes",
    )

    log_level: str = Field(default="INFO", description="Console log level")

    @field_validator("source_mongo_url", "target_mongo_url", mode="before")
    @classmethod
    def strip_url(cls, v: Any) -> Any:
        """Trim surrounding whitespace from connection strings."""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Upper-case the log level name."""
        return v.upper()

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Return a validated copy with non-None overrides applied."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return Settings.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid settings: {e}", original_error=e) from e


def validate_mongo_url(url: str | None, side: str) -> str:
    """Check that a connection string is present and uses a MongoDB scheme.

    Args:
        url: Connection string to check
        side: "source" or "target", used in the error message

    Returns:
        The stripped connection string

    Raises:
        ConfigurationError: If the URL is empty or has an unsupported scheme
    """
    url = (url or "").strip()
    if not url:
        raise ConfigurationError(
            f"Missing {side} connection string. "
            f"Set {side.upper()}_MONGO_URL or pass it as an argument."
        )
    if not url.startswith(MONGO_URL_SCHEMES):
        raise ConfigurationError(
            f"Malformed {side} connection string: expected one of "
            f"{', '.join(MONGO_URL_SCHEMES)}"
        )
    return url


def require_connection_urls(source_url: str | None, target_url: str | None) -> tuple[str, str]:
    """Validate both endpoints before any connection attempt."""
    return validate_mongo_url(source_url, "source"), validate_mongo_url(target_url, "target")


@functools.lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load settings from environment. Cached for performance."""
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}", original_error=e) from e

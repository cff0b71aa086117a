"""Configuration management for the toolbox API.

This module provides centralized configuration using pydantic-settings.
All configuration options can be set via environment variables with the
TOOLBOX_ prefix, or via a .env file in the project root.

Environment Variables:
    TOOLBOX_EXPORTS_DIR: Directory generated workbooks are written to
        (default: excel-exports)
    TOOLBOX_BASE_URL: Public base URL used to build download links
        (RENDER_EXTERNAL_URL is also honoured; default: http://localhost:3000)
    TOOLBOX_ENABLE_RETENTION_SWEEPER: Run the hourly export sweep (default: true)
    TOOLBOX_RETENTION_MAX_AGE_MINUTES: Age after which exports are deleted
        (default: 60)
    TOOLBOX_RETENTION_INTERVAL_MINUTES: Minutes between sweeps, aligned to the
        wall clock (default: 60)
    TOOLBOX_FETCH_TIMEOUT_SECONDS: Timeout for web page fetches (default: 30)
    TOOLBOX_FETCH_USER_AGENT: User-Agent header sent when fetching pages
    TOOLBOX_LOG_LEVEL: Logging level (default: INFO)
    TOOLBOX_DEBUG: Enable debug mode (default: false)
    TOOLBOX_CORS_ORIGINS: Comma-separated CORS origins (default: *)
    TOOLBOX_SERVER_HOST: Server bind host (default: 0.0.0.0)
    TOOLBOX_SERVER_PORT: Server bind port (default: 3000)
"""

import logging
from datetime import timedelta
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Example .env file:
        TOOLBOX_BASE_URL=https://toolbox.example.com
        TOOLBOX_LOG_LEVEL=DEBUG
        TOOLBOX_RETENTION_MAX_AGE_MINUTES=120
    """

    model_config = SettingsConfigDict(
        env_prefix="TOOLBOX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # =========================================================================
    # Excel Export Settings
    # =========================================================================

    exports_dir: str = "excel-exports"
    """Directory generated workbooks are written to and served from."""

    base_url: str = Field(
        default="http://localhost:3000",
        validation_alias=AliasChoices("TOOLBOX_BASE_URL", "RENDER_EXTERNAL_URL"),
    )
    """Public base URL used to build absolute download links."""

    # =========================================================================
    # Retention Settings
    # =========================================================================

    enable_retention_sweeper: bool = True
    """Start the periodic export sweep with the application."""

    retention_max_age_minutes: int = 60
    """Exports older than this many minutes are deleted by the sweep."""

    retention_interval_minutes: int = 60
    """Minutes between sweeps. Sweeps run on wall-clock boundaries."""

    # =========================================================================
    # Web Page Reader Settings
    # =========================================================================

    fetch_timeout_seconds: float = 30.0
    """Timeout applied to a single web page fetch."""

    fetch_user_agent: str = "Mozilla/5.0 (compatible; toolbox-api/0.1)"
    """User-Agent header sent with web page fetches."""

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "INFO"
    """Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL."""

    debug: bool = False
    """Enable debug mode with additional logging and error details."""

    # =========================================================================
    # Server Settings
    # =========================================================================

    cors_origins: str = "*"
    """Comma-separated list of allowed CORS origins, or * for all."""

    server_host: str = "0.0.0.0"
    """Host address for the server to bind to."""

    server_port: int = 3000
    """Port for the server to listen on."""

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return upper_v

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL and drop any trailing slash."""
        stripped = v.strip().rstrip("/")
        if not stripped.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {v!r}")
        return stripped

    @field_validator("retention_max_age_minutes", "retention_interval_minutes")
    @classmethod
    def validate_retention_minutes(cls, v: int) -> int:
        """Validate retention windows are positive."""
        if v < 1:
            raise ValueError(f"Retention minutes must be at least 1, got {v}")
        return v

    @field_validator("fetch_timeout_seconds")
    @classmethod
    def validate_fetch_timeout(cls, v: float) -> float:
        """Validate fetch timeout is positive."""
        if v <= 0:
            raise ValueError(f"fetch_timeout_seconds must be positive, got {v}")
        return v

    @field_validator("server_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError(f"server_port must be between 1 and 65535, got {v}")
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def exports_path(self) -> Path:
        """Get the exports directory as a Path."""
        return Path(self.exports_dir)

    @property
    def retention_max_age(self) -> timedelta:
        """Get the export age threshold as a timedelta."""
        return timedelta(minutes=self.retention_max_age_minutes)

    @property
    def retention_interval(self) -> timedelta:
        """Get the sweep interval as a timedelta."""
        return timedelta(minutes=self.retention_interval_minutes)

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.log_level)
        return level

    def to_safe_dict(self) -> dict[str, Any]:
        """Convert settings to a dictionary suitable for logging."""
        return {
            "exports_dir": self.exports_dir,
            "base_url": self.base_url,
            "enable_retention_sweeper": self.enable_retention_sweeper,
            "retention_max_age_minutes": self.retention_max_age_minutes,
            "retention_interval_minutes": self.retention_interval_minutes,
            "fetch_timeout_seconds": self.fetch_timeout_seconds,
            "fetch_user_agent": self.fetch_user_agent,
            "log_level": self.log_level,
            "debug": self.debug,
            "cors_origins": self.cors_origins,
            "server_host": self.server_host,
            "server_port": self.server_port,
        }


def validate_settings_on_startup(s: Settings) -> None:
    """Validate settings on application startup.

    Emits warnings for configurations that work but are unlikely to be
    intended in production, then logs a configuration summary.

    Args:
        s: Settings instance to validate.
    """
    logger = logging.getLogger(__name__)

    if not s.enable_retention_sweeper:
        logger.warning(
            "Retention sweeper is disabled. Generated workbooks in "
            f"{s.exports_dir} will accumulate until removed manually."
        )

    if s.base_url.startswith("http://localhost"):
        logger.warning(
            f"Download links will point at {s.base_url}. "
            "Set TOOLBOX_BASE_URL for deployed environments."
        )

    if s.cors_origins == "*" and not s.debug:
        logger.warning(
            "CORS is configured to allow all origins (*). "
            "Consider restricting this in production."
        )

    logger.info(
        f"Configuration loaded: log_level={s.log_level}, debug={s.debug}, "
        f"exports_dir={s.exports_dir}, "
        f"retention_max_age_minutes={s.retention_max_age_minutes}"
    )


# Create the global settings instance
settings = Settings()

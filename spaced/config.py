"""
Application configuration.

Loads settings from environment variables (and `.env`) with sensible defaults.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings


LOG_LEVELS = ("debug", "info", "warning", "error")


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # ==========================================================================
    # Environment
    # ==========================================================================

    environment: str = "development"
    debug: bool = False
    log_level: str = "info"

    # ==========================================================================
    # API Server
    # ==========================================================================

    api_host: str = "0.0.0.0"
    api_port: int = 16716
    cors_origins: str = "*"

    # ==========================================================================
    # Database
    # ==========================================================================

    database_path: str = "data/data.sqlite"

    # ==========================================================================
    # Authentication
    # ==========================================================================

    # None keeps sessions alive until logout
    session_ttl_minutes: int | None = None

    # Bootstrap administrator, created at startup when both are set
    admin_username: str = ""
    admin_password: str = ""

    # ==========================================================================
    # Optional Services
    # ==========================================================================

    sentry_dsn: str = ""

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def has_bootstrap_admin(self) -> bool:
        return bool(self.admin_username and self.admin_password)

    class Config:
        env_prefix = "SPACED_"
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str = "info") -> logging.Logger:
    """
    Configure the root logger and return the application logger.

    The returned logger is what gets handed to the database and services.
    """
    if level.lower() not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {level!r}, expected one of {LOG_LEVELS}")

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="[%(asctime)s.%(msecs)03d] [%(levelname)-7s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        force=True,
    )
    return logging.getLogger("spaced")

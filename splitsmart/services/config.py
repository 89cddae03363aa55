"""Application configuration from environment variables.

Values are read from SPLITSMART_* environment variables and an optional
.env file in the working directory.
"""

import logging
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SPLITSMART_",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    data_backend: Literal["memory", "sql"] = Field(
        default="memory", description="Storage backend: in-memory demo data or SQL database"
    )
    database_url: str = Field(
        default="sqlite:///./splitsmart.db",
        description="SQLAlchemy connection string (sql backend only)",
    )
    database_echo: bool = Field(default=False, description="Log SQL queries")
    seed_demo_data: bool = Field(
        default=True, description="Preload demo users, groups and expenses (memory backend)"
    )

    # Display
    locale: str = Field(default="en_US", description="Locale for amount formatting")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: str = Field(default="logs/splitsmart.log", description="Log file path")


# Lazy loader so environment changes before first use are honoured
_settings_instance: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
        logger.debug(f"Loaded settings: backend={_settings_instance.data_backend}")
    return _settings_instance


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    global _settings_instance
    _settings_instance = None


__all__ = ["Settings", "get_settings", "reset_settings"]

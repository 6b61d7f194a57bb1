"""
Configuration settings for the skillkeep progress engine.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def default_database_url() -> str:
    """
    Resolve the default SQLite database location.

    Priority:
    1. SKILLKEEP_DB environment variable (a file path)
    2. $XDG_DATA_HOME/skillkeep/skillkeep.db
    3. ~/.local/share/skillkeep/skillkeep.db
    """
    explicit = os.environ.get("SKILLKEEP_DB")
    if explicit:
        path = Path(explicit)
    else:
        data_home = os.environ.get("XDG_DATA_HOME")
        base = Path(data_home) if data_home else Path.home() / ".local" / "share"
        path = base / "skillkeep" / "skillkeep.db"
    return f"sqlite:///{path}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Database
    # ========================================
    database_url: str = Field(
        default_factory=default_database_url,
        description="SQLAlchemy connection string for the progress store",
    )

    # ========================================
    # Snapshots
    # ========================================
    snapshot_keep: int = Field(
        default=5,
        ge=1,
        description="Number of most recent snapshots retained after a session",
    )
    snapshot_version: int = Field(
        default=3,
        description="Schema version written into new snapshot documents",
    )

    # ========================================
    # Skill Graph
    # ========================================
    skill_catalog_path: str | None = Field(
        default=None,
        description="JSON skill catalog used by the CLI (list of {id, name, prerequisites})",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

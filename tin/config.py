"""
Central configuration loader.
Reads from environment variables (via .env) into a typed settings object.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings


# ---------------------------------------------------------------------------
# Load .env from repo root (if present)
# ---------------------------------------------------------------------------
_REPO_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(_REPO_ROOT / ".env")


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Paths
    DATABASE_PATH: Path = Field(
        default=_REPO_ROOT / "data" / "tin.db",
        validation_alias="TIN_DB_PATH",
    )

    # Archival
    ARCHIVE_AFTER_DAYS: int = Field(default=30, validation_alias="TIN_ARCHIVE_AFTER_DAYS")
    ARCHIVE_INTERVAL_SECONDS: float = Field(
        default=24 * 60 * 60, validation_alias="TIN_ARCHIVE_INTERVAL_SECONDS"
    )
    ARCHIVER_ENABLED: bool = Field(default=True, validation_alias="TIN_ARCHIVER_ENABLED")

    # Balance policy for todo edits/deletes (off keeps deductions permanent)
    REBALANCE_TODO_AMOUNTS: bool = Field(
        default=False, validation_alias="TIN_REBALANCE_TODO_AMOUNTS"
    )

    # Query limits
    SEARCH_LIMIT: int = Field(default=50, validation_alias="TIN_SEARCH_LIMIT")
    RECENT_CHANGES_LIMIT: int = Field(default=50, validation_alias="TIN_RECENT_CHANGES_LIMIT")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", validation_alias="TIN_LOG_LEVEL")

    # API server
    SERVER_HOST: str = Field(default="127.0.0.1", validation_alias="SERVER_HOST")
    SERVER_PORT: int = Field(default=8000, validation_alias="SERVER_PORT")
    SERVER_RELOAD: bool = Field(default=False, validation_alias="SERVER_RELOAD")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"
        populate_by_name = True


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------
def get_db_path() -> Path:
    return get_settings().DATABASE_PATH

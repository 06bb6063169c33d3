"""Application configuration loaded from the environment."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BACKEND_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    """Runtime settings; every field can be overridden by an env variable."""

    model_config = SettingsConfigDict(
        env_file=str(BACKEND_DIR / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    project_name: str = "Social Backend"
    api_v1_prefix: str = "/api/v1"

    database_url: str = f"sqlite+aiosqlite:///{BACKEND_DIR / 'social.db'}"
    sql_echo: bool = False

    log_level: str = "INFO"

    # Archived posts older than this are hard-deleted on the next archive read.
    archive_retention_hours: int = 24


settings = Settings()

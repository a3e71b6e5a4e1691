from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_name: str = "coursebase"

    database_url: str = "sqlite:///./coursebase.db"
    # Pool limits only apply to server databases; SQLite uses its own pool.
    db_pool_size: int = 10
    db_pool_timeout: float = 2.0
    db_pool_recycle: int = 30

    # Directory holding Course.csv, Unit.csv, Chunk.csv, Exercise.csv, Chunk-Resource.csv
    csv_dir: str = "future-tables"

    log_level: str = "INFO"
    log_json: bool = False

    # Record exercises whose chunk cannot be resolved as errors instead of skipping them.
    strict_exercise_parents: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()

"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables (.env file).
"""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Project Info
    PROJECT_NAME: str = "Workout Session Engine"
    VERSION: str = "0.1.0"
    DESCRIPTION: str = "Workout session lifecycle, timers, set ledger and recovery."

    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database (the remote store)
    DATABASE_URL: str = "sqlite:///./workouts.db"
    AUTO_CREATE_TABLES: bool = True  # development convenience; production uses Alembic

    # Remote calls
    REMOTE_TIMEOUT_SECONDS: float = 10.0

    # Timers
    TICK_SECONDS: float = 1.0
    DEFAULT_REST_SECONDS: int = 90
    REST_PRESETS: List[int] = [30, 60, 90, 120, 180, 300]
    MAX_REST_SECONDS: int = 3600

    # Client-side cache
    SELECTED_ROUTINE_CACHE_PATH: str = ".cache/selected_routines.json"

    # History
    HISTORY_LIMIT: int = 10

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


# Global settings instance
settings = Settings()

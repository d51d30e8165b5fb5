"""
Application configuration using pydantic-settings.
Loads from environment variables with .env file support.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )
    
    # Database
    database_url: str = "sqlite+aiosqlite:///./moono.db"

    # Application
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR
    project_name: str = "Moono"
    version: str = "0.1.0"

    # Gating
    unit_gating_policy: str = "rollup"  # rollup, first_only

    # Quiz feedback
    feedback_correct: str = "correct"
    feedback_incorrect: str = "incorrect"
    feedback_unconfigured: str = "This question is not configured."

    # Read steps
    default_read_glyph: str = "\U0001F4DA"

    # Completion context used when the lesson was opened without a unit
    no_unit_title: str = "Lessons"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

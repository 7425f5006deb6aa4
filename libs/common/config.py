from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    ENVIRONMENT: Literal["local", "development", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    DEFAULT_LANGUAGE: Literal["tr", "ru", "en", "de"] = "en"

    # Persisted state
    APP_STATE_KEY: str = "deckAppState"
    STATE_BACKEND: Literal["file", "memory"] = "file"
    STATE_DIR: str = ".deck_state"
    SEED_ON_COLD_START: bool = True

    # Share links
    PUBLIC_BASE_URL: str = "http://localhost:3000/"

    # Generative AI
    # Placeholder values keep local/test runs working without credentials.
    AI_DEFAULT_MODEL: str = "gemini/gemini-2.5-flash"
    AI_API_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    AI_API_KEY: str = ""
    AI_VIDEO_MODEL: str = "veo-2.0-generate-001"
    AI_IMAGE_MODEL: str = "imagen-4.0-generate-001"
    VIDEO_POLL_INTERVAL_SECONDS: float = 10.0
    VIDEO_POLL_MAX_ATTEMPTS: int = 60

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("PUBLIC_BASE_URL")
    @classmethod
    def ensure_trailing_slash(cls, v: str) -> str:
        if not v.endswith("/"):
            return v + "/"
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()

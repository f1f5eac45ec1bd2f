"""
Centralized configuration via Pydantic Settings v2.
Reads values from a .env file or environment variables.

Settings are never built at import time, only through get_settings(), so the
package imports cleanly without a .env file (tests, tooling).
"""
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Groq
    groq_api_key: Optional[str] = None
    groq_model: str = "llama-3.3-70b-versatile"
    llm_temperature: float = 0.1
    llm_timeout: float = 30.0

    # App
    log_level: str = "INFO"
    environment: str = "development"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Lazy singleton, reads .env on first call only."""
    return Settings()

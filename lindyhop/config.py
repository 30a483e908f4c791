from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LINDYHOP_", env_file=".env", extra="ignore")

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for production (structured JSON), False for dev (colored)

    # Pipeline
    DEFAULT_OUTPUT: str = "json"
    CORRELATION_HEADER: str = "X-Correlation-ID"

    # Documentation
    DOCS_TITLE: str = "API"
    DOCS_VERSION: str = "0.1.0"
    DOCS_BASE_PATH: str = "/"


@lru_cache
def get_settings() -> Settings:
    return Settings()

"""Application configuration via environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # App
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # Database (async SQLAlchemy URL)
    database_url: str = "sqlite+aiosqlite:///./database.sqlite"

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Per-IP rate limit: rate_limit_max requests every rate_limit_window seconds
    rate_limit_window: int = 15 * 60
    rate_limit_max: int = 100

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()

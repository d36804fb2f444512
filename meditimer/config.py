from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Storage
    STORE_BACKEND: str = "redis"  # "redis" or "file"
    REDIS_URL: str = "redis://localhost:6379/0"
    DATA_DIR: Path = Path.home() / ".meditimer"
    SESSIONS_KEY: str = "sessions"

    # Timer
    DEFAULT_MINUTES: int = 10
    MIN_MINUTES: int = 1
    MAX_MINUTES: int = 120
    TICK_SECONDS: float = 1.0

    # Stats
    STREAK_MAX_WEEKS: int = 52

    # Observability
    SENTRY_DSN: str = ""
    LOG_LEVEL: str = "INFO"

    ENVIRONMENT: str = "development"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()

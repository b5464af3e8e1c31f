"""Configuration settings for the workout schedule API."""
import os
from typing import List, Literal


EnvironmentType = Literal["development", "staging", "production"]


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


class Settings:
    """Application settings."""

    # Environment
    ENVIRONMENT: EnvironmentType = "development"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:3001"]

    # Remote workout-data service
    WORKOUT_DATA_MOVEMENTS_URL: str | None = None
    WORKOUT_DATA_SESSIONS_URL: str | None = None
    WORKOUT_DATA_PLANS_URL: str | None = None
    WORKOUT_DATA_PAGE_LIMIT: int = 100
    WORKOUT_DATA_TIMEOUT_SEC: int = 30
    WORKOUT_DATA_MAX_ATTEMPTS: int = 3

    def __init__(self):
        # Environment
        env = os.getenv("ENVIRONMENT", "development").lower()
        if env in ("development", "staging", "production"):
            self.ENVIRONMENT = env  # type: ignore
        else:
            self.ENVIRONMENT = "development"

        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

        origins = os.getenv("CORS_ORIGINS")
        if origins:
            self.CORS_ORIGINS = [o.strip() for o in origins.split(",") if o.strip()]

        # Remote workout-data service
        self.WORKOUT_DATA_MOVEMENTS_URL = os.getenv("WORKOUT_DATA_MOVEMENTS_URL")
        self.WORKOUT_DATA_SESSIONS_URL = os.getenv("WORKOUT_DATA_SESSIONS_URL")
        self.WORKOUT_DATA_PLANS_URL = os.getenv("WORKOUT_DATA_PLANS_URL")
        self.WORKOUT_DATA_PAGE_LIMIT = _int_env("WORKOUT_DATA_PAGE_LIMIT", 100)
        self.WORKOUT_DATA_TIMEOUT_SEC = _int_env("WORKOUT_DATA_TIMEOUT_SEC", 30)
        self.WORKOUT_DATA_MAX_ATTEMPTS = _int_env("WORKOUT_DATA_MAX_ATTEMPTS", 3)


settings = Settings()

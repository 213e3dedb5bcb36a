# techpedia/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (Postgres connection string; sqlite:// works locally)
      - JWT_SECRET (signing secret for access tokens)
      - JWT_REFRESH_SECRET (signing secret for refresh tokens)

    Optional:
      - XENDIT_SECRET_KEY (required only when checkout is used)
      - BASE_URL (front-end origin used for payment redirect links)
    """

    PROJECT_NAME: str = "Techpedia Dashboard API"
    API_V1_STR: str = "/api/v1"

    DATABASE_URL: str
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 5
    DB_ECHO: bool = False

    # JWT issuance / verification
    JWT_SECRET: str
    JWT_REFRESH_SECRET: str
    JWT_ALG: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    REFRESH_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Xendit invoice API
    XENDIT_SECRET_KEY: str | None = None
    XENDIT_API_URL: str = "https://api.xendit.co"
    XENDIT_TIMEOUT_SECONDS: float = 10.0

    # Front-end base URL for payment success/failure redirects
    BASE_URL: str = "http://localhost:3400"

    CORS_ORIGINS: list[str] = [
        "http://localhost:3400",
        "http://127.0.0.1:3400",
    ]

    # PENDING orders without an invoice older than this are expired
    STALE_ORDER_MINUTES: int = 30

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()

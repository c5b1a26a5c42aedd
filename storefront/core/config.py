# storefront/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - JWT_SECRET (shared secret used by the auth provider to sign tokens)

    Optional:
      - DATABASE_URL (defaults to a local SQLite file)
      - ENFORCE_PRICE_CHECK (reject checkout when a cart price went stale)
    """

    PROJECT_NAME: str = "Storefront Checkout"
    API_V1_STR: str = "/api/v1"

    # DB config
    DATABASE_URL: str = "sqlite:///./storefront.db"
    DB_ECHO: bool = False

    # JWT verification (backend-side)
    JWT_SECRET: str
    JWT_ALG: str = "HS256"

    # Checkout policy
    ENFORCE_PRICE_CHECK: bool = True

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()

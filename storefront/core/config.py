# storefront/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (Postgres connection string)
      - JWT_SECRET (HS256 signing secret shared with the auth provider)

    Optional:
      - FULFILLMENT_LOCATION_ID / FULFILLMENT_LOCATION_NAME
        (the dark store that stock is reserved from at checkout)
      - CORS_ORIGINS
      - SUPER_ADMIN_EMAILS (JSON list; these identities become SUPER_ADMIN
        on login, so a fresh deployment has someone to grant roles)
    """

    PROJECT_NAME: str = "Storefront API"
    API_V1_STR: str = "/api"

    DATABASE_URL: str

    # JWT verification (backend-side)
    JWT_SECRET: str
    JWT_ALG: str = "HS256"

    # Dark store used for stock checks and decrements
    FULFILLMENT_LOCATION_ID: str = "main-dark-store"
    FULFILLMENT_LOCATION_NAME: str = "Main Dark Store"

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
    ]

    SUPER_ADMIN_EMAILS: list[str] = []

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()

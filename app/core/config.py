# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (Postgres connection string; sqlite:// is accepted for tests)
      - JWT_SECRET (signing secret for access tokens)
      - JWT_REFRESH_SECRET (signing secret for refresh tokens)

    Optional:
      - ENVIRONMENT=development adds stack traces to 500 responses
    """

    PROJECT_NAME: str = "Local Market Backend"
    API_PREFIX: str = "/api"
    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_SSLMODE: str | None = None

    # JWT issuing / verification
    JWT_SECRET: str
    JWT_REFRESH_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "local-market-backend"
    JWT_AUDIENCE: str = "local-market-app"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # Guest carts
    GUEST_ID_HEADER: str = "X-Guest-Id"

    # Orders
    DEFAULT_PAYMENT_METHOD: str = "COD"

    CORS_ORIGINS: list[str] = ["*"]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()

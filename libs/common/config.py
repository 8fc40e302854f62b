from functools import lru_cache
from typing import Literal, Optional

from pydantic import AnyHttpUrl, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from libs.common.errors import ConfigurationError


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    ENVIRONMENT: Literal["development", "production", "test"] = "development"
    LOG_LEVEL: str = "INFO"
    SITE_URL: AnyHttpUrl
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Supabase (auth tokens, storage, realtime)
    SUPABASE_URL: AnyHttpUrl
    SUPABASE_ANON_KEY: str = Field(..., min_length=1)
    SUPABASE_SERVICE_ROLE_KEY: str = Field(..., min_length=1)
    SUPABASE_JWT_SECRET: str = Field(..., min_length=1)
    SUPABASE_STORAGE_BUCKET: str = "products"

    # Stripe
    STRIPE_PUBLISHABLE_KEY: str = Field(..., min_length=1)
    STRIPE_SECRET_KEY: str = Field(..., min_length=1)
    STRIPE_WEBHOOK_SECRET: str = Field(..., min_length=1)
    STRIPE_CURRENCY: str = "usd"

    # Rate limiting (memory:// is per-process; use redis:// when scaled out)
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+psycopg://", 1)
        return v

    @property
    def site_url(self) -> str:
        return str(self.SITE_URL).rstrip("/")


def validate_settings() -> Settings:
    """
    Build settings from the environment, collecting every problem at once.

    Raises ConfigurationError listing one ``FIELD: message`` line per
    missing or invalid variable.
    """
    try:
        return Settings()
    except ValidationError as exc:
        problems = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        ]
        raise ConfigurationError(problems) from exc


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return validate_settings()

"""Application configuration using Pydantic Settings."""
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings (environment variables or .env)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = Field("LeadFlow")
    ENVIRONMENT: str = Field("development")
    DEBUG: bool = Field(False)
    LOG_LEVEL: str = Field("INFO")
    API_V1_PREFIX: str = Field("/api")
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    # Database
    DATABASE_URL: str = Field("sqlite:///./leadflow.db")
    DB_POOL_SIZE: int = Field(5)
    DB_MAX_OVERFLOW: int = Field(10)

    @computed_field
    @property
    def IS_SQLITE(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    # Redis (optional: OTP store backend and send rate limiting)
    REDIS_URL: Optional[str] = Field(None)

    # JWT
    JWT_SECRET_KEY: str = Field("change-me-in-production")
    JWT_ALGORITHM: str = Field("HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60 * 12)

    # RESEND
    RESEND_API_KEY: Optional[str] = Field(None)
    RESEND_FROM_EMAIL: str = Field("notifications@leadflow.com")
    EMAIL_MAX_RETRIES: int = Field(3)

    # Two-factor OTP
    OTP_STORE_BACKEND: str = Field("memory", pattern="^(memory|redis)$")
    OTP_LENGTH: int = Field(6)
    OTP_EXPIRE_MINUTES: int = Field(10)
    OTP_MAX_ATTEMPTS: int = Field(5)
    OTP_DISPATCH_TIMEOUT_SECS: float = Field(5.0)
    OTP_SWEEP_INTERVAL_SECS: int = Field(60)
    OTP_LOCK_TIMEOUT_SECS: int = Field(5)

    # Rate limiting
    OTP_SEND_LIMIT: int = Field(5)
    OTP_SEND_WINDOW_SECS: int = Field(3600)


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

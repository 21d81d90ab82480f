# visitor_register/config.py
"""
Application configuration using Pydantic-Settings.
All settings can be overridden via environment variables or .env file.
JWT_SECRET has no default: the service refuses to start without it.
"""

from pydantic import field_validator
from limits import parse_many
from pydantic_settings import BaseSettings
from typing import Optional
from zoneinfo import ZoneInfoNotFoundError

from visitor_register.utils.clock import resolve_timezone


class Settings(BaseSettings):
    # ── Database ──────────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite:///./visitors.db"

    # ── Network ───────────────────────────────────────────────────────────
    BACKEND_HOST: str = "0.0.0.0"
    BACKEND_PORT: int = 3001
    CORS_ORIGINS: list[str] = ["*"]

    # ── Security ──────────────────────────────────────────────────────────
    JWT_SECRET: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # ── Seed admin (only used when no admin account exists yet) ───────────
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: Optional[str] = None

    # ── Visits ────────────────────────────────────────────────────────────
    TIMEZONE: str = "UTC"          # Calendar used for "visitors today"

    # ── Uploads ───────────────────────────────────────────────────────────
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # ── Rate limiting (per client address and route) ──────────────────────
    RATE_LIMIT: str = "100 per 15 minutes"
    RATE_LIMIT_ENABLED: bool = True

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    @field_validator("JWT_SECRET")
    @classmethod
    def secret_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("JWT_SECRET must not be empty")
        return value

    @field_validator("TIMEZONE")
    @classmethod
    def timezone_known(cls, value: str) -> str:
        value = value.strip()
        try:
            resolve_timezone(value)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            raise ValueError(f"Unknown TIMEZONE '{value}'")
        return value

    @field_validator("RATE_LIMIT")
    @classmethod
    def rate_limit_parses(cls, value: str) -> str:
        parse_many(value)
        return value

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()

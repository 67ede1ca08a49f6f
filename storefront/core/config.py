"""
Storefront settings, read from the environment and .env

Defaults assume production: DEBUG is off and SECRET_KEY must be supplied.
With ENVIRONMENT=development a missing SECRET_KEY falls back to a dev-only
key so the server and the seed command start without a .env file.
"""
import json
import os
import logging
from typing import List, Union
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

LOCAL_FRONTEND_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./storefront.db"

WEAK_SECRET_MARKERS = ("secret", "password", "changeme", "dev-only")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    APP_NAME: str = "Storefront"
    DEBUG: bool = False
    ENVIRONMENT: str = "production"

    # Storage: "sql" persists through SQLAlchemy, "memory" lives in-process
    DOCUMENT_STORE: str = "sql"
    DATABASE_URL: str = DEFAULT_DATABASE_URL
    DB_CREATE_TABLES: bool = True
    SEED_ON_STARTUP: bool = False
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_RECYCLE: int = 3600

    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    PASSWORD_MIN_LENGTH: int = 6

    CORS_ORIGINS: Union[str, List[str]] = LOCAL_FRONTEND_ORIGINS
    COOKIE_SECURE: bool = True
    COOKIE_SAMESITE: str = "lax"

    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "100/minute"
    RATE_LIMIT_AUTH: str = "5/minute"
    RATE_LIMIT_CHECKOUT: str = "10/minute"

    MAX_CART_LINE_QUANTITY: int = 99
    # Simulated payment step between order creation and "processing"
    CHECKOUT_PAYMENT_DELAY_SECONDS: float = 1.0

    @field_validator("DOCUMENT_STORE")
    @classmethod
    def validate_document_store(cls, v):
        v = v.lower()
        if v not in ("sql", "memory"):
            raise ValueError("DOCUMENT_STORE must be 'sql' or 'memory'")
        return v

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def use_async_driver(cls, v):
        """postgres:// and postgresql:// URLs are pointed at asyncpg."""
        if not v:
            return v
        for prefix in ("postgres://", "postgresql://"):
            if v.startswith(prefix):
                return "postgresql+asyncpg://" + v[len(prefix):]
        return v

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def split_cors_origins(cls, v):
        """JSON array or comma-separated list; blank means the local frontend."""
        if not isinstance(v, str):
            return v
        v = v.strip()
        if not v:
            return LOCAL_FRONTEND_ORIGINS
        if v.startswith("["):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        return [origin.strip() for origin in v.split(",") if origin.strip()]

    @model_validator(mode="after")
    def check_production_settings(self):
        if self.ENVIRONMENT != "production":
            return self

        problems = []
        if self.DEBUG:
            problems.append("DEBUG must be off in production")
        if any(marker in self.SECRET_KEY.lower() for marker in WEAK_SECRET_MARKERS):
            problems.append("SECRET_KEY looks like a placeholder; generate one with secrets.token_urlsafe(32)")
        if self.DOCUMENT_STORE == "memory":
            problems.append("DOCUMENT_STORE=memory loses every order on restart")
        if "*" in self.CORS_ORIGINS:
            problems.append("wildcard CORS origin is not allowed")

        if problems:
            raise ValueError("Invalid production settings:\n" + "\n".join(f"  - {p}" for p in problems))
        return self


try:
    settings = Settings()
except Exception:
    if os.getenv("ENVIRONMENT", "development") != "development":
        raise
    logger.warning("Settings failed to load; falling back to development defaults (set SECRET_KEY in .env)")
    os.environ.setdefault("SECRET_KEY", "dev-only-key-not-for-production")
    os.environ.setdefault("ENVIRONMENT", "development")
    settings = Settings()

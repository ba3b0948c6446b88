"""
Centralised application settings loaded from environment / .env file.

Uses pydantic-settings so every value can be overridden via env vars
or the .env file at the project root.
"""

from __future__ import annotations

import json
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode

_DEFAULT_SECRET = "CHANGE-ME-TO-A-RANDOM-64-CHAR-HEX-STRING-IN-PRODUCTION"


class Settings(BaseSettings):
    # ── Project ──────────────────────────────────────────────────────
    PROJECT_NAME: str = "Storefront"
    VERSION: str = "1.0.0"
    API_V1_PREFIX: str = "/api/v1"

    # ── Key-value store ──────────────────────────────────────────────
    KV_BACKEND: str = "sql"  # sql | redis | memory
    DATABASE_URL: str = "sqlite+aiosqlite:///./storefront.db"
    KV_TABLE: str = "kv_store"
    REDIS_URL: str = "redis://localhost:6379/0"

    # ── JWT ──────────────────────────────────────────────────────────
    SECRET_KEY: str = _DEFAULT_SECRET
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    COOKIE_SECURE: bool = False  # Set True in HTTPS production

    # ── Object storage ───────────────────────────────────────────────
    STORAGE_ROOT: str = "./storage"
    PRODUCTS_BUCKET: str = "products"
    PROFILES_BUCKET: str = "profiles"
    SIGNED_URL_EXPIRE_SECONDS: int = 60 * 60 * 24 * 365

    # ── CORS ─────────────────────────────────────────────────────────
    CORS_ORIGINS: Annotated[list[str], NoDecode] = ["*"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors(cls, v: object) -> list[str]:
        if isinstance(v, str):
            if v.strip().startswith("["):
                return json.loads(v)
            return [o.strip() for o in v.split(",") if o.strip()]
        return v  # type: ignore[return-value]

    @field_validator("KV_BACKEND")
    @classmethod
    def _validate_backend(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in {"sql", "redis", "memory"}:
            raise ValueError("KV_BACKEND must be one of: sql, redis, memory")
        return v

    # ── Logging ──────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    # ── Rate limiting ────────────────────────────────────────────────
    RATE_LIMIT_ENABLED: bool = True
    LOGIN_RATE_LIMIT: str = "5/minute"
    REGISTER_RATE_LIMIT: str = "10/minute"

    # ── Attendance ───────────────────────────────────────────────────
    # When False, a second clock-in on the same day overwrites the record
    # and repeated clock-outs recompute the total.
    ATTENDANCE_STRICT_TRANSITIONS: bool = True

    # ── Default owner (seeded on first startup) ─────────────────────
    FIRST_OWNER_EMAIL: str = "owner@storefront.local"
    FIRST_OWNER_PASSWORD: str = "changeme123"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }


settings = Settings()

if settings.SECRET_KEY == _DEFAULT_SECRET:
    import logging

    logging.getLogger("storefront.core.config").warning(
        "WARNING: You are running with the default INSECURE Secret Key! "
        "Update the SECRET_KEY in your .env file immediately."
    )

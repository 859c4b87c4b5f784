from __future__ import annotations

import os
from decimal import Decimal
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseAppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "TillVAT"
    ENV: str = "dev"
    DATABASE_URL: str | None = None
    REDIS_URL: str = "redis://localhost:6379/0"
    CORS_ALLOW_ORIGINS: list[str] = ["*"]
    CORS_ALLOW_METHODS: list[str] = ["*"]
    CORS_ALLOW_HEADERS: list[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "plain"

    # Tenant display defaults (formatting only, never computation)
    CURRENCY_CODE: str = "GBP"
    REPORT_TIMEZONE: str = "Europe/London"

    # VAT engine
    VAT_RECONCILIATION_TOLERANCE: Decimal = Decimal("0.01")  # one penny
    VAT_STATUTORY_RATES: list[Decimal] = [Decimal("0"), Decimal("5"), Decimal("20")]
    REPORT_TOP_ITEMS_LIMIT: int = 20

    # Greeting counter storage: "db" (SQL upsert) or "redis" (INCR)
    GREETING_COUNTER_BACKEND: str = "db"

    @field_validator("GREETING_COUNTER_BACKEND")
    @classmethod
    def _check_counter_backend(cls, v: str) -> str:
        value = v.lower()
        if value not in {"db", "redis"}:
            raise ValueError(f"Unsupported GREETING_COUNTER_BACKEND: {v}")
        return value

    @field_validator("VAT_RECONCILIATION_TOLERANCE")
    @classmethod
    def _check_tolerance(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("VAT_RECONCILIATION_TOLERANCE must not be negative")
        return v

    @model_validator(mode="after")
    def _validate_required_fields(self) -> BaseAppSettings:
        # Convert Heroku's postgres:// URL to postgresql://
        if self.DATABASE_URL and self.DATABASE_URL.startswith("postgres://"):
            self.DATABASE_URL = self.DATABASE_URL.replace("postgres://", "postgresql://", 1)

        if self.ENV.lower() == "prod" and not self.DATABASE_URL:
            raise ValueError("Missing required production settings: DATABASE_URL")
        return self


class DevSettings(BaseAppSettings):
    ENV: str = "dev"
    DATABASE_URL: str = "sqlite:///./tillvat_dev.db"


class TestSettings(BaseAppSettings):
    ENV: str = "test"
    DATABASE_URL: str = "sqlite:///:memory:"


class ProdSettings(BaseAppSettings):
    ENV: str = "prod"
    CORS_ALLOW_ORIGINS: list[str] = []
    LOG_FORMAT: str = "json"


_ENV_TO_SETTINGS: dict[str, type[BaseAppSettings]] = {
    "dev": DevSettings,
    "development": DevSettings,
    "test": TestSettings,
    "testing": TestSettings,
    "prod": ProdSettings,
    "production": ProdSettings,
}


@lru_cache
def get_settings() -> BaseAppSettings:
    env_name = os.getenv("APP_ENV") or os.getenv("ENV") or "dev"
    env = env_name.lower()
    settings_cls = _ENV_TO_SETTINGS.get(env, DevSettings)
    return settings_cls()


settings = get_settings()

from __future__ import annotations
from typing import Optional

from pydantic import Field, AliasChoices, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _to_async_dsn(value: str) -> str:
    if value.startswith("postgres://"):
        value = "postgresql://" + value[len("postgres://"):]
    if value.startswith("postgresql://"):
        return "postgresql+asyncpg://" + value[len("postgresql://"):]
    return value


class Settings(BaseSettings):
    # === Storage / DB ===
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./subscriptions.db",
        validation_alias=AliasChoices("DATABASE_URL", "POSTGRES_DSN"),
    )
    SQL_ECHO: bool = False

    # === JWT ===
    JWT_SECRET_KEY: str = "change-me-in-production-please-32b"
    JWT_ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "subsapi"
    JWT_AUDIENCE: str = "subsapi-clients"
    JWT_EXPIRATION_MINUTES: int = 60

    # === Retry policy ===
    RETRY_ATTEMPTS: int = 3
    RETRY_MULTIPLIER: float = 2.0
    RETRY_EXP_BASE: float = 2.0
    RETRY_MAX_DELAY: float = 60.0

    # === Web ===
    WEBAPP_HOST: str = "0.0.0.0"
    WEBAPP_PORT: int = 8080
    ENVIRONMENT: str = Field("production", description="development | production")
    INIT_DB_ON_START: bool = False

    # === Logs ===
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, alias="LOG_JSON")
    log_sql: str = Field(default="WARNING", alias="LOG_SQL")
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE")

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def _v_dsn(cls, v):
        if v is None or v == "":
            return "sqlite+aiosqlite:///./subscriptions.db"
        return _to_async_dsn(str(v))

    @field_validator("JWT_SECRET_KEY")
    @classmethod
    def _v_secret(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("JWT_SECRET_KEY cannot be empty")
        return v

    @field_validator("RETRY_ATTEMPTS")
    @classmethod
    def _v_attempts(cls, v: int) -> int:
        if v < 0:
            raise ValueError("RETRY_ATTEMPTS must be >= 0")
        return v

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() in {"dev", "development", "local"}

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


settings = Settings()

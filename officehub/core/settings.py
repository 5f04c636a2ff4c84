from __future__ import annotations

import json
from datetime import timedelta
from functools import lru_cache
from typing import List

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, DotEnvSettingsSource, EnvSettingsSource, SettingsConfigDict


DEFAULT_ORIGINS = [
    "http://localhost",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]


class _CommaSeparatedListsMixin:
    """Accept comma-separated values for list settings as well as JSON arrays."""

    comma_separated_fields = frozenset({"allow_origins"})

    def decode_complex_value(self, field_name, field, value):  # type: ignore[override]
        try:
            return super().decode_complex_value(field_name, field, value)
        except json.JSONDecodeError:
            if field_name in self.comma_separated_fields:
                return value
            raise


class _EnvSource(_CommaSeparatedListsMixin, EnvSettingsSource):
    pass


class _DotEnvSource(_CommaSeparatedListsMixin, DotEnvSettingsSource):
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    project_name: str = "OfficeHub API"
    project_version: str = "1.0.0"
    environment: str = Field(
        default="development",
        description="Deployment environment name",
        validation_alias=AliasChoices("ENV", "ENVIRONMENT"),
    )
    log_level: str = Field(default="INFO", description="Logging level")

    # Database
    database_url: str = Field(
        default="postgresql+psycopg2://postgres@localhost:5432/officehub",
        description="SQLAlchemy database URL",
    )
    auto_create_tables: bool = Field(
        default=False,
        description="Run metadata.create_all at startup (local development only)",
    )

    # DB pool tuning (Postgres)
    db_pool_size: int = Field(default=5, description="Base DB connection pool size")
    db_max_overflow: int = Field(default=10, description="Additional DB connections beyond pool size")
    db_pool_timeout: int = Field(default=30, description="Seconds to wait for a DB connection")
    db_pool_recycle: int = Field(default=1800, description="Recycle DB connections after N seconds")

    # Sessions
    session_secret: str = Field(
        default="change_me",
        description="Secret used to sign session cookies",
        validation_alias=AliasChoices("SESSION_SECRET", "SECRET_KEY"),
    )
    session_algorithm: str = Field(default="HS256", description="Session cookie signing algorithm")
    session_cookie_name: str = Field(default="officehub_session", description="Name of the session cookie")
    session_lifetime_days: int = Field(default=7, description="Server-side session lifetime in days")
    session_cookie_secure: bool = Field(default=False, description="Only send the session cookie over HTTPS")
    session_cookie_samesite: str = Field(default="lax", description="SameSite policy for the session cookie")

    # Passwords
    bcrypt_rounds: int = Field(default=12, description="bcrypt cost factor (minimum 10)")
    min_password_length: int = Field(default=8, description="Minimum accepted password length")

    # First-run bootstrap
    seed_on_startup: bool = Field(default=True, description="Seed initial accounts when the user store is empty")
    bootstrap_admin_email: str = Field(default="admin@officehub.local")
    bootstrap_admin_password: str = Field(default="admin12345")
    bootstrap_staff_email: str = Field(default="staff@officehub.local")
    bootstrap_staff_password: str = Field(default="staff12345")

    # CORS
    allow_origins: List[str] = Field(default_factory=lambda: list(DEFAULT_ORIGINS))

    @field_validator("allow_origins", mode="before")
    @classmethod
    def parse_allow_origins(cls, value: str | List[str]) -> List[str]:
        if isinstance(value, list):
            return value
        if isinstance(value, str) and value.strip():
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return list(DEFAULT_ORIGINS)

    @field_validator("bcrypt_rounds")
    @classmethod
    def enforce_min_rounds(cls, value: int) -> int:
        if value < 10:
            raise ValueError("bcrypt_rounds must be at least 10")
        return value

    @field_validator("session_cookie_samesite")
    @classmethod
    def normalize_samesite(cls, value: str) -> str:
        policy = (value or "").strip().lower()
        if policy not in {"lax", "strict", "none"}:
            return "lax"
        return policy

    @property
    def session_lifetime(self) -> timedelta:
        """Lifetime shared by the server-side session row and the cookie; non-positive means the default week."""
        days = self.session_lifetime_days if self.session_lifetime_days > 0 else 7
        return timedelta(days=days)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            _EnvSource(settings_cls),
            _DotEnvSource(settings_cls),
            file_secret_settings,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

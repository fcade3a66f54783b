# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import sys
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

HashAlgorithm = Literal["argon2id", "scrypt"]

_SECTION_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    frozen=True,
    validate_by_name=True,
)


def _parse_bool(value: str | bool) -> bool:
    if isinstance(value, str):
        return value.lower() in ("1", "true", "yes")
    return bool(value)


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite+aiosqlite:///sessionauth.db", alias="DATABASE_URL")
    echo: bool = Field(False, alias="DATABASE_ECHO")

    model_config = _SECTION_CONFIG

    @field_validator("echo", mode="before")
    @classmethod
    def _parse_echo(cls, value: str | bool) -> bool:
        return _parse_bool(value)


class SecurityConfig(BaseSettings):
    hash_algorithm: HashAlgorithm = Field("argon2id", alias="HASH_ALGORITHM")

    # Cookie transport for the session token
    cookie_secure: bool = Field(False, alias="COOKIE_SECURE")
    cookie_samesite: str = Field("Strict", alias="COOKIE_SAMESITE")

    # Login throttling
    login_max_attempts: int = Field(5, ge=1, alias="LOGIN_MAX_ATTEMPTS")
    login_attempt_window: float = Field(60 * 60, ge=1.0, alias="LOGIN_ATTEMPT_WINDOW")
    login_lockout_seconds: float = Field(15 * 60, ge=1.0, alias="LOGIN_LOCKOUT_SECONDS")

    model_config = _SECTION_CONFIG

    @field_validator("hash_algorithm", mode="before")
    @classmethod
    def _normalize_algorithm(cls, value: str) -> str:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("cookie_secure", mode="before")
    @classmethod
    def _parse_cookie_secure(cls, value: str | bool) -> bool:
        return _parse_bool(value)


class EventsConfig(BaseSettings):
    redis_url: str | None = Field(None, alias="REDIS_URL")
    user_created_channel: str = Field("users.created", alias="USER_CREATED_CHANNEL")

    model_config = _SECTION_CONFIG


def _database_config_factory() -> DatabaseConfig:
    return DatabaseConfig()  # type: ignore[call-arg]


def _security_config_factory() -> SecurityConfig:
    return SecurityConfig()  # type: ignore[call-arg]


def _events_config_factory() -> EventsConfig:
    return EventsConfig()  # type: ignore[call-arg]


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    database: DatabaseConfig = Field(default_factory=_database_config_factory)
    security: SecurityConfig = Field(default_factory=_security_config_factory)
    events: EventsConfig = Field(default_factory=_events_config_factory)

    model_config = _SECTION_CONFIG

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        return _parse_bool(value)

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "AppConfig":
        if not self.is_production():
            return self

        warnings = []
        if not self.security.cookie_secure:
            warnings.append("⚠️  Cookie Secure flag is DISABLED (use HTTPS!)")
        if self.database.url.startswith("sqlite"):
            warnings.append("⚠️  SQLite database configured for production")

        if warnings:
            print("\n⚠️  PRODUCTION SECURITY WARNINGS:", file=sys.stderr)
            for warning in warnings:
                print(f"   {warning}", file=sys.stderr)

        return self

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()  # type: ignore[call-arg]


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "EventsConfig",
    "HashAlgorithm",
    "SecurityConfig",
    "load_config",
]

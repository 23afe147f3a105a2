# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import sys
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _parse_flag(value: str | bool) -> bool:
    if isinstance(value, str):
        return value.lower() in ("1", "true", "yes")
    return bool(value)


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite:///authcore.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", validate_by_name=True, extra="ignore"
    )

    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")


class SessionConfig(BaseSettings):
    ttl_seconds: int = Field(24 * 60 * 60, ge=1, alias="SESSION_TTL_SECONDS")
    sliding: bool = Field(False, alias="SESSION_SLIDING")
    backend: Literal["sql", "memory"] = Field("sql", alias="SESSION_BACKEND")
    cookie_name: str = Field("auth_token", alias="SESSION_COOKIE_NAME")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", validate_by_name=True, extra="ignore"
    )

    @field_validator("sliding", mode="before")
    @classmethod
    def _parse_bool(cls, value: str | bool) -> bool:
        return _parse_flag(value)


class PasswordConfig(BaseSettings):
    min_length: int = Field(6, ge=1, le=128, alias="PASSWORD_MIN_LENGTH")
    hash_method: str = Field("scrypt", alias="PASSWORD_HASH_METHOD")
    salt_length: int = Field(16, ge=8, alias="PASSWORD_SALT_LENGTH")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", validate_by_name=True, extra="ignore"
    )


class SecurityConfig(BaseSettings):
    # Cookie security
    cookie_secure: bool = Field(False, alias="COOKIE_SECURE")
    cookie_samesite: str = Field("Strict", alias="COOKIE_SAMESITE")

    # CORS
    allowed_origins: Annotated[list[str], NoDecode] = Field(["*"], alias="ALLOWED_ORIGINS")

    # Reverse proxies in front of the app; X-Forwarded-For is ignored when 0
    trusted_proxy_count: int = Field(0, ge=0, alias="TRUSTED_PROXY_COUNT")

    # Rate limiting
    enable_rate_limit: bool = Field(True, alias="ENABLE_RATE_LIMIT")
    rate_limit_requests: int = Field(10, ge=1, alias="RL_LIMIT")
    rate_limit_window: float = Field(60.0, gt=0, alias="RL_WINDOW")

    # Brute-force lockout
    login_lockout_enabled: bool = Field(True, alias="LOGIN_LOCKOUT_ENABLED")
    login_max_attempts: int = Field(5, ge=1, alias="LOGIN_MAX_ATTEMPTS")
    login_lockout_seconds: float = Field(15 * 60, gt=0, alias="LOGIN_LOCKOUT_SECONDS")
    login_attempt_window: float = Field(60 * 60, gt=0, alias="LOGIN_ATTEMPT_WINDOW")

    # HSTS
    enable_hsts: bool = Field(False, alias="ENABLE_HSTS")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", validate_by_name=True, extra="ignore"
    )

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _parse_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator(
        "cookie_secure",
        "enable_rate_limit",
        "login_lockout_enabled",
        "enable_hsts",
        mode="before",
    )
    @classmethod
    def _parse_bool(cls, value: str | bool) -> bool:
        return _parse_flag(value)


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    secret_key: str = Field("dev", alias="SECRET_KEY")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_file: Path | None = Field(None, alias="LOG_FILE")

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    password: PasswordConfig = Field(default_factory=PasswordConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)

    model_config = SettingsConfigDict(
        env_prefix="AUTHCORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        validate_by_name=True,
        validate_assignment=True,
        extra="ignore",
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        return _parse_flag(value)

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "AppConfig":
        if not self.is_production():
            return self

        if self.secret_key in ("dev", "development", "test", ""):
            print(
                "\nCRITICAL SECURITY ERROR: Insecure SECRET_KEY detected in production!\n"
                "   SECRET_KEY must be a strong random value in production.\n"
                "   Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\"\n",
                file=sys.stderr,
            )
            sys.exit(1)

        warnings = []
        if not self.security.cookie_secure:
            warnings.append("Cookie Secure flag is DISABLED (use HTTPS!)")
        if "*" in self.security.allowed_origins:
            warnings.append("CORS allows wildcard (*) origins")
        if not self.security.enable_hsts:
            warnings.append("HSTS is DISABLED (recommended for HTTPS)")
        if self.session.backend == "memory":
            warnings.append("In-memory session backend loses sessions on restart")

        if warnings:
            print("\nPRODUCTION SECURITY WARNINGS:", file=sys.stderr)
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
    "PasswordConfig",
    "SecurityConfig",
    "SessionConfig",
    "load_config",
]

"""
Application configuration models and helpers.

Secrets and provider endpoints are resolved once per process and handed to
the relay components explicitly, so tests can substitute fixtures without
touching global state.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Literal, Optional

import os

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


def _split_csv(value: str | tuple[str, ...] | list[str]) -> tuple[str, ...]:
    if isinstance(value, tuple):
        return value
    if isinstance(value, list):
        return tuple(value)
    return tuple(item.strip() for item in value.split(",") if item.strip())


class ProviderSettings(BaseSettings):
    """Credentials and endpoints of the third-party OAuth provider."""

    model_config = SettingsConfigDict(populate_by_name=True)

    client_id: str = Field(..., validation_alias="RELAY_CLIENT_ID")
    client_secret: str = Field(..., validation_alias="RELAY_CLIENT_SECRET")
    authorize_url: AnyHttpUrl = Field(
        "https://api.kroger.com/v1/connect/oauth2/authorize",
        validation_alias="PROVIDER_AUTHORIZE_URL",
    )
    token_url: AnyHttpUrl = Field(
        "https://api.kroger.com/v1/connect/oauth2/token",
        validation_alias="PROVIDER_TOKEN_URL",
    )
    redirect_uri: AnyHttpUrl = Field(
        "https://us-central1-krocli.cloudfunctions.net/callback",
        validation_alias="RELAY_REDIRECT_URI",
        description="Fixed callback URL registered with the provider.",
    )
    client_credentials_scope: str = Field(
        "product.compact",
        validation_alias="PROVIDER_CLIENT_CREDENTIALS_SCOPE",
    )
    http_timeout_seconds: float = Field(10.0, validation_alias="HTTP_TIMEOUT_SECONDS")


class OAuthSettings(BaseSettings):
    """Relay session and scope configuration."""

    model_config = SettingsConfigDict(populate_by_name=True)

    session_ttl_seconds: int = Field(300, validation_alias="SESSION_TTL_SECONDS")
    allowed_scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        (
            "product.compact",
            "cart.basic:write",
            "profile.compact",
            "coupon.basic",
        ),
        validation_alias="OAUTH_ALLOWED_SCOPES",
    )
    default_scope: str = Field(
        "cart.basic:write profile.compact",
        validation_alias="OAUTH_DEFAULT_SCOPE",
    )

    @field_validator("allowed_scopes", mode="before")
    @classmethod
    def _split_scopes(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing scopes as a comma-separated string."""
        return _split_csv(value)


class RateLimitSettings(BaseSettings):
    """Fixed-window budgets per relay action. Windows are in minutes."""

    model_config = SettingsConfigDict(populate_by_name=True)

    authorize_max_requests: int = Field(5, validation_alias="RATE_LIMIT_AUTHORIZE_MAX")
    authorize_window_minutes: int = Field(
        60, validation_alias="RATE_LIMIT_AUTHORIZE_WINDOW_MINUTES"
    )
    client_token_max_requests: int = Field(
        30, validation_alias="RATE_LIMIT_CLIENT_TOKEN_MAX"
    )
    client_token_window_minutes: int = Field(
        60, validation_alias="RATE_LIMIT_CLIENT_TOKEN_WINDOW_MINUTES"
    )
    refresh_max_requests: int = Field(30, validation_alias="RATE_LIMIT_REFRESH_MAX")
    refresh_window_minutes: int = Field(
        60, validation_alias="RATE_LIMIT_REFRESH_WINDOW_MINUTES"
    )


class StoreSettings(BaseSettings):
    """Document store backend selection."""

    model_config = SettingsConfigDict(populate_by_name=True)

    backend: Literal["sqlite", "dynamodb"] = Field(
        "sqlite", validation_alias="STORE_BACKEND"
    )
    db_path: str = Field("data/relay.db", validation_alias="STORE_DB_PATH")
    region_name: str = Field("us-east-1", validation_alias="AWS_REGION")
    dynamodb_table_name: Optional[str] = Field(
        None,
        validation_alias="DYNAMODB_TABLE_NAME",
        description="Single table holding every collection; required for dynamodb.",
    )


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    model_config = SettingsConfigDict(populate_by_name=True)

    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        description=(
            "Secret used to derive the symmetric key for encrypting stored tokens."
        ),
    )
    trusted_proxy_count: int = Field(
        0,
        ge=0,
        validation_alias="TRUSTED_PROXY_COUNT",
        description=(
            "Reverse proxies in front of the relay. The client address is the "
            "X-Forwarded-For hop this many entries from the right; 0 uses the "
            "socket peer."
        ),
    )


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    cors_allow_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        ("*",), validation_alias="CORS_ALLOW_ORIGINS"
    )
    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    rate_limits: RateLimitSettings = Field(default_factory=RateLimitSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        return _split_csv(value)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "OAuthSettings",
    "ProviderSettings",
    "RateLimitSettings",
    "SecuritySettings",
    "StoreSettings",
    "get_settings",
]

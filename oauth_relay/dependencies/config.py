"""
FastAPI dependencies derived from configuration and the incoming request.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from oauth_relay.core.config import AppSettings, get_settings
from oauth_relay.utils.http import resolve_client_ip


@lru_cache()
def _settings_singleton() -> AppSettings:
    """Resolve secrets and endpoints once per process."""
    return get_settings()


def get_app_settings() -> AppSettings:
    """FastAPI dependency returning application settings."""
    return _settings_singleton()


def get_client_ip(
    request: Request,
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> str:
    """Identifier used to key rate limits for the caller."""
    return resolve_client_ip(
        request, trusted_proxy_count=settings.security.trusted_proxy_count
    )


__all__ = ["get_app_settings", "get_client_ip"]

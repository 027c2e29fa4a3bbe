"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_document_store,
    get_oauth_relay,
    get_provider_oauth_client,
    get_rate_limiter,
    get_session_registry,
    get_token_cipher_service,
    get_token_proxy,
)
from .config import get_app_settings, get_client_ip

__all__ = [
    "get_app_settings",
    "get_client_ip",
    "get_document_store",
    "get_oauth_relay",
    "get_provider_oauth_client",
    "get_rate_limiter",
    "get_session_registry",
    "get_token_cipher_service",
    "get_token_proxy",
]

"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache

from oauth_relay.clients import (
    DocumentStore,
    DynamoDBClient,
    ProviderOAuthClient,
    SQLiteStore,
)
from oauth_relay.core.config import get_settings
from oauth_relay.services import (
    OAuthRelay,
    RateLimiter,
    SessionRegistry,
    TokenCipherService,
    TokenProxy,
)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_document_store() -> DocumentStore:
    """Provide the configured document store backend."""
    settings = _settings()
    if settings.store.backend == "dynamodb":
        return DynamoDBClient(settings.store)
    return SQLiteStore(settings.store.db_path)


@lru_cache()
def get_provider_oauth_client() -> ProviderOAuthClient:
    """Create a singleton provider OAuth client."""
    return ProviderOAuthClient(_settings().provider)


@lru_cache()
def get_token_cipher_service() -> TokenCipherService:
    """Provide symmetric encryption helper for parked tokens."""
    settings = _settings()
    secret = settings.security.token_encryption_secret or settings.provider.client_secret
    return TokenCipherService(secret=secret)


def get_rate_limiter() -> RateLimiter:
    return RateLimiter(get_document_store())


def get_session_registry() -> SessionRegistry:
    return SessionRegistry(get_document_store(), get_token_cipher_service())


def get_oauth_relay() -> OAuthRelay:
    """Build the relay state machine from the configured collaborators."""
    settings = _settings()
    return OAuthRelay(
        registry=get_session_registry(),
        rate_limiter=get_rate_limiter(),
        oauth_client=get_provider_oauth_client(),
        oauth_settings=settings.oauth,
        rate_limits=settings.rate_limits,
    )


def get_token_proxy() -> TokenProxy:
    settings = _settings()
    return TokenProxy(
        rate_limiter=get_rate_limiter(),
        oauth_client=get_provider_oauth_client(),
        rate_limits=settings.rate_limits,
    )


__all__ = [
    "get_document_store",
    "get_oauth_relay",
    "get_provider_oauth_client",
    "get_rate_limiter",
    "get_session_registry",
    "get_token_cipher_service",
    "get_token_proxy",
]

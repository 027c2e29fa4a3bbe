"""Expose constructed client wrappers."""

from .document_store import DocumentNotFoundError, DocumentStore
from .dynamodb import DynamoDBClient
from .provider_oauth import OAuthTokenExchangeError, ProviderOAuthClient
from .sqlite_store import SQLiteStore

__all__ = [
    "DocumentNotFoundError",
    "DocumentStore",
    "DynamoDBClient",
    "OAuthTokenExchangeError",
    "ProviderOAuthClient",
    "SQLiteStore",
]

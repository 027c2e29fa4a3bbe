"""Service layer exports."""

from .pages import ClientSource, render_error_page, render_success_page
from .rate_limiter import RateLimiter
from .relay import (
    InvalidRequestError,
    InvalidSessionIdError,
    OAuthRelay,
    RateLimitExceededError,
    SessionExpiredError,
    SessionLostError,
    TokenProxy,
)
from .scopes import validate_scope
from .sessions import SessionNotFoundError, SessionRegistry
from .token_cipher import TokenCipherService

__all__ = [
    "ClientSource",
    "InvalidRequestError",
    "InvalidSessionIdError",
    "OAuthRelay",
    "RateLimitExceededError",
    "RateLimiter",
    "SessionExpiredError",
    "SessionLostError",
    "SessionNotFoundError",
    "SessionRegistry",
    "TokenCipherService",
    "TokenProxy",
    "render_error_page",
    "render_success_page",
    "validate_scope",
]

"""
OAuth relay state machine.

A session moves ``Created -> Completed -> Consumed`` or ``Created -> Expired``;
both terminal states delete the document. ``state`` binds the provider
callback to the session that started it, while the polling client only ever
knows its own ``session_id``.

Two callbacks racing on one ``state`` can both pass the existence and TTL
checks and both redeem the code with the provider; the last update wins.
There is no claim step guarding against that.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict

from oauth_relay.clients.provider_oauth import OAuthTokenExchangeError, ProviderOAuthClient
from oauth_relay.core.config import OAuthSettings, RateLimitSettings
from oauth_relay.models.session import TokenSet
from oauth_relay.services.pages import ClientSource
from oauth_relay.services.rate_limiter import RateLimiter
from oauth_relay.services.scopes import validate_scope
from oauth_relay.services.sessions import SessionNotFoundError, SessionRegistry

logger = logging.getLogger(__name__)

SESSION_ID_PATTERN = re.compile(r"^[0-9a-f]{16,64}$")


class InvalidRequestError(ValueError):
    """Raised for missing or malformed client parameters."""


class InvalidSessionIdError(InvalidRequestError):
    """Raised when the client's ``session_id`` is missing or malformed."""


class RateLimitExceededError(Exception):
    """Raised when a caller has used up its budget for an action."""


class SessionExpiredError(Exception):
    """Raised when a callback arrives after the session TTL; the session is gone."""


class SessionLostError(RuntimeError):
    """Raised when the session disappears before exchanged tokens are stored."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _check_session_id(session_id: str | None) -> str:
    if not session_id:
        raise InvalidSessionIdError("session_id is required")
    if not SESSION_ID_PATTERN.fullmatch(session_id):
        raise InvalidSessionIdError("session_id must be a hex string 16-64 chars")
    return session_id


class OAuthRelay:
    """Orchestrates authorize, callback and token polling."""

    def __init__(
        self,
        *,
        registry: SessionRegistry,
        rate_limiter: RateLimiter,
        oauth_client: ProviderOAuthClient,
        oauth_settings: OAuthSettings,
        rate_limits: RateLimitSettings,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._registry = registry
        self._limiter = rate_limiter
        self._oauth = oauth_client
        self._settings = oauth_settings
        self._limits = rate_limits
        self._clock = clock

    @property
    def session_ttl(self) -> timedelta:
        return timedelta(seconds=self._settings.session_ttl_seconds)

    def begin_authorization(
        self,
        *,
        session_id: str | None,
        client_ip: str,
        scope: str | None = None,
        source: str | None = None,
    ) -> str:
        """Create a session and return the provider URL to redirect to."""
        session_id = _check_session_id(session_id)

        if not self._limiter.allow(
            client_ip,
            "authorize",
            self._limits.authorize_max_requests,
            self._limits.authorize_window_minutes,
        ):
            raise RateLimitExceededError("authorize")

        normalized_scope = validate_scope(
            scope or self._settings.default_scope,
            allowed=self._settings.allowed_scopes,
            default=self._settings.default_scope,
        )
        state = self._registry.create(
            session_id, source or ClientSource.UNKNOWN.value, scope=normalized_scope
        )
        return self._oauth.build_authorization_url(scope=normalized_scope, state=state)

    async def complete_authorization(self, *, code: str, state: str) -> ClientSource:
        """Redeem ``code`` for the session bound to ``state`` and park the tokens.

        Raises ``SessionNotFoundError``, ``SessionExpiredError``,
        ``OAuthTokenExchangeError`` or ``SessionLostError``.
        """
        session = self._registry.get(state)
        if session is None:
            raise SessionNotFoundError(state)

        created_at = session.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        if self._clock() - created_at > self.session_ttl:
            self._registry.delete(state)
            logger.info("Deleted expired relay session")
            raise SessionExpiredError(state)

        try:
            tokens = await self._oauth.exchange_authorization_code(code)
        except OAuthTokenExchangeError as exc:
            logger.error("Provider token exchange failed (%s): %s", exc.status_code, exc.body)
            raise

        try:
            self._registry.mark_completed(state, tokens)
        except SessionNotFoundError as exc:
            raise SessionLostError(state) from exc
        return ClientSource.from_tag(session.source)

    def claim_tokens(self, session_id: str) -> TokenSet | None:
        """Hand out a completed session's tokens once, deleting the session.

        The delete is the claim: of several polls that found the same
        session, only the one whose delete removed it delivers. Returns
        ``None`` while the browser leg is still in progress.
        """
        session = self._registry.find_by_session_id(session_id, completed=True)
        if session is None:
            return None
        tokens = session.tokens()
        if not self._registry.delete(session.state):
            logger.info("Relay session already claimed by another poll")
            return None
        if tokens is not None:
            logger.info("Delivered tokens for a completed relay session")
        return tokens


class TokenProxy:
    """Pass-through client-credential and refresh grants; no session state."""

    def __init__(
        self,
        *,
        rate_limiter: RateLimiter,
        oauth_client: ProviderOAuthClient,
        rate_limits: RateLimitSettings,
    ) -> None:
        self._limiter = rate_limiter
        self._oauth = oauth_client
        self._limits = rate_limits

    async def client_token(self, *, client_ip: str) -> Dict[str, Any]:
        if not self._limiter.allow(
            client_ip,
            "token_client",
            self._limits.client_token_max_requests,
            self._limits.client_token_window_minutes,
        ):
            raise RateLimitExceededError("token_client")
        return await self._oauth.client_credentials_token()

    async def refresh(
        self, *, client_ip: str, refresh_token: str | None
    ) -> Dict[str, Any]:
        if not self._limiter.allow(
            client_ip,
            "token_refresh",
            self._limits.refresh_max_requests,
            self._limits.refresh_window_minutes,
        ):
            raise RateLimitExceededError("token_refresh")
        if not refresh_token:
            raise InvalidRequestError("refresh_token is required")
        return await self._oauth.refresh_token(refresh_token)


__all__ = [
    "InvalidRequestError",
    "InvalidSessionIdError",
    "OAuthRelay",
    "RateLimitExceededError",
    "SESSION_ID_PATTERN",
    "SessionExpiredError",
    "SessionLostError",
    "TokenProxy",
]

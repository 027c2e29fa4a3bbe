"""
Provider OAuth utilities.

Builds authorization URLs and performs the token-endpoint calls that require
the relay's confidential client secret.
"""

from __future__ import annotations

from typing import Any, Dict
from urllib.parse import urlencode

import httpx

from oauth_relay.core.config import ProviderSettings
from oauth_relay.models.session import TokenSet


class OAuthTokenExchangeError(Exception):
    """Raised when the token endpoint returns an error."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"token endpoint returned {status_code}")
        self.status_code = status_code
        self.body = body


class ProviderOAuthClient:
    """Talk to the provider's authorize and token endpoints."""

    def __init__(
        self,
        settings: ProviderSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    @property
    def redirect_uri(self) -> str:
        return str(self._settings.redirect_uri)

    def build_authorization_url(self, *, scope: str, state: str) -> str:
        """Construct the provider consent URL."""
        params = {
            "client_id": self._settings.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": scope,
            "state": state,
        }
        return f"{self._settings.authorize_url}?{urlencode(params)}"

    async def _post_token_request(self, form: Dict[str, str]) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=self._settings.http_timeout_seconds,
            transport=self._transport,
        ) as client:
            return await client.post(
                str(self._settings.token_url),
                data=form,
                auth=(self._settings.client_id, self._settings.client_secret),
                headers={"Accept": "application/json"},
            )

    async def _request_token_payload(self, form: Dict[str, str]) -> Dict[str, Any]:
        response = await self._post_token_request(form)
        if response.is_error:
            raise OAuthTokenExchangeError(response.status_code, response.text)
        return response.json()

    async def exchange_authorization_code(self, code: str) -> TokenSet:
        """Exchange an authorization code for user tokens."""
        payload = await self._request_token_payload(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.redirect_uri,
            }
        )
        if not payload.get("access_token"):
            raise OAuthTokenExchangeError(
                200, "Incomplete token payload returned from provider."
            )
        return TokenSet(
            access_token=payload["access_token"],
            refresh_token=payload.get("refresh_token"),
            expires_in=payload.get("expires_in"),
            token_type=payload.get("token_type"),
        )

    async def client_credentials_token(self) -> Dict[str, Any]:
        """Request an app-only token; the provider JSON is returned untouched."""
        return await self._request_token_payload(
            {
                "grant_type": "client_credentials",
                "scope": self._settings.client_credentials_scope,
            }
        )

    async def refresh_token(self, refresh_token: str) -> Dict[str, Any]:
        """Refresh a user token; the provider JSON is returned untouched."""
        return await self._request_token_payload(
            {
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
            }
        )


__all__ = ["OAuthTokenExchangeError", "ProviderOAuthClient"]

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import base64
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from oauth_relay.clients.provider_oauth import OAuthTokenExchangeError, ProviderOAuthClient
from oauth_relay.core.config import ProviderSettings

pytestmark = pytest.mark.anyio


def _settings() -> ProviderSettings:
    return ProviderSettings(
        client_id="relay-client",
        client_secret="relay-secret",
        authorize_url="https://provider.example.com/oauth2/authorize",
        token_url="https://provider.example.com/oauth2/token",
        redirect_uri="https://relay.example.com/callback",
    )


class RecordingTransport:
    """Capture outgoing token requests and answer with a canned response."""

    def __init__(self, status_code: int = 200, payload=None, text: str | None = None):
        self.requests: list[httpx.Request] = []
        self._status_code = status_code
        self._payload = payload
        self._text = text

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._text is not None:
            return httpx.Response(self._status_code, text=self._text)
        return httpx.Response(self._status_code, json=self._payload)

    def client(self) -> ProviderOAuthClient:
        return ProviderOAuthClient(_settings(), transport=httpx.MockTransport(self.handler))

    def form(self, index: int = 0) -> dict[str, list[str]]:
        return parse_qs(self.requests[index].content.decode("utf-8"))


def test_build_authorization_url() -> None:
    client = ProviderOAuthClient(_settings())

    url = urlparse(client.build_authorization_url(scope="cart.basic:write", state="s1"))
    query = parse_qs(url.query)

    assert f"{url.scheme}://{url.netloc}{url.path}" == (
        "https://provider.example.com/oauth2/authorize"
    )
    assert query == {
        "client_id": ["relay-client"],
        "redirect_uri": ["https://relay.example.com/callback"],
        "response_type": ["code"],
        "scope": ["cart.basic:write"],
        "state": ["s1"],
    }


async def test_exchange_authorization_code_uses_basic_auth() -> None:
    transport = RecordingTransport(
        payload={
            "access_token": "at",
            "refresh_token": "rt",
            "expires_in": 1800,
            "token_type": "Bearer",
        }
    )

    tokens = await transport.client().exchange_authorization_code("the-code")

    assert tokens.access_token == "at"
    assert tokens.refresh_token == "rt"
    assert tokens.expires_in == 1800

    request = transport.requests[0]
    assert str(request.url) == "https://provider.example.com/oauth2/token"
    expected = base64.b64encode(b"relay-client:relay-secret").decode("ascii")
    assert request.headers["authorization"] == f"Basic {expected}"
    assert request.headers["content-type"] == "application/x-www-form-urlencoded"
    assert transport.form() == {
        "grant_type": ["authorization_code"],
        "code": ["the-code"],
        "redirect_uri": ["https://relay.example.com/callback"],
    }


async def test_exchange_error_carries_status_and_body() -> None:
    transport = RecordingTransport(status_code=400, text='{"error":"invalid_grant"}')

    with pytest.raises(OAuthTokenExchangeError) as excinfo:
        await transport.client().exchange_authorization_code("stale")

    assert excinfo.value.status_code == 400
    assert "invalid_grant" in excinfo.value.body


async def test_exchange_without_access_token_is_an_error() -> None:
    transport = RecordingTransport(payload={"token_type": "Bearer"})

    with pytest.raises(OAuthTokenExchangeError):
        await transport.client().exchange_authorization_code("code")


async def test_client_credentials_returns_payload_untouched() -> None:
    payload = {"access_token": "app", "expires_in": 1800, "extra": {"nested": True}}
    transport = RecordingTransport(payload=payload)

    result = await transport.client().client_credentials_token()

    assert result == payload
    assert transport.form() == {
        "grant_type": ["client_credentials"],
        "scope": ["product.compact"],
    }


async def test_refresh_token_posts_refresh_grant() -> None:
    transport = RecordingTransport(payload={"access_token": "new"})

    result = await transport.client().refresh_token("old-rt")

    assert result == {"access_token": "new"}
    assert transport.form() == {
        "grant_type": ["refresh_token"],
        "refresh_token": ["old-rt"],
    }


async def test_refresh_token_upstream_failure() -> None:
    transport = RecordingTransport(status_code=401, payload={"error": "invalid_client"})

    with pytest.raises(OAuthTokenExchangeError) as excinfo:
        await transport.client().refresh_token("rt")

    assert excinfo.value.status_code == 401

import re

import pytest

from _fakes import FakeClock, InMemoryDocumentStore
from oauth_relay.models.session import TokenSet
from oauth_relay.services.sessions import (
    SESSION_COLLECTION,
    SessionNotFoundError,
    SessionRegistry,
)
from oauth_relay.services.token_cipher import TokenCipherService

SESSION_ID = "ab" * 16


@pytest.fixture()
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture()
def cipher() -> TokenCipherService:
    return TokenCipherService(secret="registry-secret")


@pytest.fixture()
def registry(store, cipher) -> SessionRegistry:
    return SessionRegistry(store, cipher, clock=FakeClock())


def test_create_generates_unpredictable_hex_state(registry, store) -> None:
    first = registry.create(SESSION_ID, "cli")
    second = registry.create(SESSION_ID, "cli")

    assert re.fullmatch(r"[0-9a-f]{32}", first)
    assert first != second
    stored = store.collections[SESSION_COLLECTION][first]
    assert stored["state"] == first
    assert stored["session_id"] == SESSION_ID
    assert stored["source"] == "cli"
    assert stored["completed"] is False
    assert "access_token" not in stored


def test_get_returns_none_for_unknown_state(registry) -> None:
    assert registry.get("0" * 32) is None


def test_mark_completed_encrypts_tokens_at_rest(registry, store, cipher) -> None:
    state = registry.create(SESSION_ID, "agent")
    registry.mark_completed(
        state,
        TokenSet(
            access_token="at_123",
            refresh_token="rt_456",
            expires_in=1800,
            token_type="Bearer",
        ),
    )

    stored = store.collections[SESSION_COLLECTION][state]
    assert stored["completed"] is True
    assert stored["access_token"] != "at_123"
    assert cipher.decrypt(stored["access_token"]) == "at_123"
    assert cipher.decrypt(stored["refresh_token"]) == "rt_456"

    session = registry.get(state)
    assert session is not None
    assert session.tokens() == TokenSet(
        access_token="at_123",
        refresh_token="rt_456",
        expires_in=1800,
        token_type="Bearer",
    )


def test_mark_completed_on_vanished_session_raises(registry) -> None:
    with pytest.raises(SessionNotFoundError):
        registry.mark_completed("f" * 32, TokenSet(access_token="at"))


def test_find_by_session_id_can_require_completion(registry) -> None:
    state = registry.create(SESSION_ID, "cli")

    assert registry.find_by_session_id(SESSION_ID).state == state
    assert registry.find_by_session_id(SESSION_ID, completed=True) is None

    registry.mark_completed(state, TokenSet(access_token="at"))
    found = registry.find_by_session_id(SESSION_ID, completed=True)
    assert found is not None
    assert found.state == state


def test_delete_removes_session(registry) -> None:
    state = registry.create(SESSION_ID, "cli")
    registry.delete(state)

    assert registry.get(state) is None
    assert registry.find_by_session_id(SESSION_ID) is None

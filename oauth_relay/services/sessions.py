"""Persistence of relay sessions in the ``sessions`` collection."""

from __future__ import annotations

import secrets
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from oauth_relay.clients.document_store import DocumentNotFoundError, DocumentStore
from oauth_relay.models.session import RelaySession, TokenSet
from oauth_relay.services.token_cipher import TokenCipherService

SESSION_COLLECTION = "sessions"
_SEALED_FIELDS = ("access_token", "refresh_token")


class SessionNotFoundError(Exception):
    """Raised when a session document does not exist."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionRegistry:
    """CRUD for sessions keyed by their ``state`` token.

    Tokens are encrypted before they reach the store and decrypted on read.
    """

    def __init__(
        self,
        store: DocumentStore,
        token_cipher: TokenCipherService,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._cipher = token_cipher
        self._clock = clock

    def _to_session(self, document: Dict[str, Any]) -> RelaySession:
        return RelaySession.model_validate(
            self._cipher.open_fields(document, _SEALED_FIELDS)
        )

    def create(self, session_id: str, source: str, scope: str | None = None) -> str:
        """Persist a new session and return its freshly generated ``state``."""
        # 128 bits; collisions are left to entropy, no existence check.
        state = secrets.token_hex(16)
        session = RelaySession(
            state=state,
            session_id=session_id,
            source=source,
            scope=scope,
            created_at=self._clock(),
        )
        self._store.put(
            SESSION_COLLECTION,
            state,
            session.model_dump(mode="json", exclude_none=True),
        )
        return state

    def get(self, state: str) -> Optional[RelaySession]:
        document = self._store.get(SESSION_COLLECTION, state)
        if document is None:
            return None
        return self._to_session(document)

    def mark_completed(self, state: str, tokens: TokenSet) -> None:
        fields = self._cipher.seal_fields(
            tokens.model_dump(exclude_none=True), _SEALED_FIELDS
        )
        fields["completed"] = True
        try:
            self._store.update(SESSION_COLLECTION, state, fields)
        except DocumentNotFoundError as exc:
            raise SessionNotFoundError(state) from exc

    def delete(self, state: str) -> bool:
        """Remove the session; ``True`` only for the caller that removed it."""
        return self._store.delete(SESSION_COLLECTION, state)

    def find_by_session_id(
        self, session_id: str, *, completed: bool | None = None
    ) -> Optional[RelaySession]:
        """Look a session up by the client's polling handle.

        With ``completed=True`` only sessions holding tokens match.
        """
        where: Dict[str, Any] = {"session_id": session_id}
        if completed is not None:
            where["completed"] = completed
        documents = self._store.query(SESSION_COLLECTION, where=where, limit=1)
        if not documents:
            return None
        return self._to_session(documents[0])


__all__ = ["SESSION_COLLECTION", "SessionNotFoundError", "SessionRegistry"]

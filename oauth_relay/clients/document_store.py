"""Document store contract shared by the SQLite and DynamoDB backends."""

from __future__ import annotations

from typing import Any, Dict, Protocol


class DocumentNotFoundError(Exception):
    """Raised when a partial update targets a document that does not exist."""


class DocumentStore(Protocol):
    """Keyed, document-oriented persistence.

    Single-document operations are atomic; nothing spans documents.
    """

    def get(self, collection: str, key: str) -> Dict[str, Any] | None:
        ...

    def put(self, collection: str, key: str, data: Dict[str, Any]) -> None:
        """Create or replace a document."""
        ...

    def update(self, collection: str, key: str, fields: Dict[str, Any]) -> None:
        """Merge ``fields`` into an existing document.

        Raises ``DocumentNotFoundError`` when the document is absent.
        """
        ...

    def delete(self, collection: str, key: str) -> bool:
        """Remove a document; ``True`` only for the call that removed it."""
        ...

    def query(
        self, collection: str, *, where: Dict[str, Any], limit: int = 1
    ) -> list[Dict[str, Any]]:
        """Return up to ``limit`` documents matching every equality in ``where``."""
        ...


__all__ = ["DocumentNotFoundError", "DocumentStore"]

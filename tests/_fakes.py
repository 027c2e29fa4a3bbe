"""In-memory collaborators shared by the relay tests."""

from __future__ import annotations

import copy
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from oauth_relay.clients.document_store import DocumentNotFoundError


class InMemoryDocumentStore:
    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict]] = {}
        self.writes: list[tuple[str, str, str]] = []

    def _collection(self, name: str) -> dict[str, dict]:
        return self.collections.setdefault(name, {})

    def get(self, collection: str, key: str) -> Dict[str, Any] | None:
        document = self._collection(collection).get(key)
        return copy.deepcopy(document) if document is not None else None

    def put(self, collection: str, key: str, data: Dict[str, Any]) -> None:
        self.writes.append(("put", collection, key))
        self._collection(collection)[key] = copy.deepcopy(data)

    def update(self, collection: str, key: str, fields: Dict[str, Any]) -> None:
        documents = self._collection(collection)
        if key not in documents:
            raise DocumentNotFoundError(key)
        self.writes.append(("update", collection, key))
        documents[key].update(copy.deepcopy(fields))

    def delete(self, collection: str, key: str) -> bool:
        self.writes.append(("delete", collection, key))
        return self._collection(collection).pop(key, None) is not None

    def query(
        self, collection: str, *, where: Dict[str, Any], limit: int = 1
    ) -> list[Dict[str, Any]]:
        matches = [
            copy.deepcopy(document)
            for document in self._collection(collection).values()
            if all(document.get(field) == value for field, value in where.items())
        ]
        return matches[:limit]


class FakeClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)

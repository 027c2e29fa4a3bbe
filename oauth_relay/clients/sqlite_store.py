"""SQLite-backed document store used in place of DynamoDB."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Dict, Optional

from oauth_relay.clients.document_store import DocumentNotFoundError


class SQLiteStore:
    """Document store using a single table keyed by (collection, key)."""

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    collection TEXT NOT NULL,
                    key TEXT NOT NULL,
                    data TEXT NOT NULL,
                    PRIMARY KEY (collection, key)
                )
                """
            )

    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT data FROM documents WHERE collection = ? AND key = ?",
                (collection, key),
            ).fetchone()
        if not row:
            return None
        return json.loads(row["data"])

    def put(self, collection: str, key: str, data: Dict[str, Any]) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO documents (collection, key, data)
                VALUES (?, ?, ?)
                ON CONFLICT(collection, key) DO UPDATE SET data = excluded.data
                """,
                (collection, key, json.dumps(data)),
            )

    def update(self, collection: str, key: str, fields: Dict[str, Any]) -> None:
        with self._connect() as conn:
            # BEGIN IMMEDIATE keeps the read-merge-write on one document atomic.
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(
                "SELECT data FROM documents WHERE collection = ? AND key = ?",
                (collection, key),
            ).fetchone()
            if not row:
                raise DocumentNotFoundError(f"{collection}/{key} does not exist")
            merged = json.loads(row["data"])
            merged.update(fields)
            conn.execute(
                "UPDATE documents SET data = ? WHERE collection = ? AND key = ?",
                (json.dumps(merged), collection, key),
            )

    def delete(self, collection: str, key: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM documents WHERE collection = ? AND key = ?",
                (collection, key),
            )
        return cursor.rowcount > 0

    def query(
        self, collection: str, *, where: Dict[str, Any], limit: int = 1
    ) -> list[Dict[str, Any]]:
        clauses = ["collection = ?"]
        params: list[Any] = [collection]
        for field, value in where.items():
            clauses.append("json_extract(data, ?) = ?")
            params.extend([f"$.{field}", value])
        params.append(limit)

        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT data FROM documents WHERE {' AND '.join(clauses)} LIMIT ?",
                params,
            ).fetchall()
        return [json.loads(row["data"]) for row in rows]


__all__ = ["SQLiteStore"]

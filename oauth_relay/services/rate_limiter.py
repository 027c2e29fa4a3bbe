"""
Fixed-window rate limiting backed by the document store.

Counters live in the ``rate_limits`` collection under ``identifier:action``.
There is no in-process cache, so every instance of the relay sees the same
counts. The check and the write are separate store calls, not a
compare-and-swap: concurrent requests on one key can each observe
``count < max`` and both increment, so the limit is soft under contention.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from oauth_relay.clients.document_store import DocumentStore
from oauth_relay.models.session import RateLimitRecord

logger = logging.getLogger(__name__)

RATE_LIMIT_COLLECTION = "rate_limits"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RateLimiter:
    """Count requests per (identifier, action) in fixed windows."""

    def __init__(
        self,
        store: DocumentStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._clock = clock

    def _write(self, key: str, record: RateLimitRecord) -> None:
        self._store.put(
            RATE_LIMIT_COLLECTION,
            key,
            {"count": record.count, "window_start": record.window_start.isoformat()},
        )

    def allow(
        self,
        identifier: str,
        action: str,
        max_requests: int,
        window_minutes: int,
    ) -> bool:
        """Record one request and report whether it fits the current window.

        ``window_minutes`` is a minute count: ``60`` means a one-hour window.
        """
        key = f"{identifier}:{action}"
        now = self._clock()
        raw = self._store.get(RATE_LIMIT_COLLECTION, key)

        if raw is None:
            self._write(key, RateLimitRecord(count=1, window_start=now))
            return True

        record = RateLimitRecord.model_validate(raw)
        window_start = record.window_start
        if window_start.tzinfo is None:
            window_start = window_start.replace(tzinfo=timezone.utc)

        if now - window_start >= timedelta(minutes=window_minutes):
            self._write(key, RateLimitRecord(count=1, window_start=now))
            return True

        if record.count < max_requests:
            record.count += 1
            self._write(key, record)
            return True

        logger.warning("Rate limit exceeded for action %s", action)
        return False


__all__ = ["RATE_LIMIT_COLLECTION", "RateLimiter"]

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import threading
from pathlib import Path

import pytest

from oauth_relay.clients.document_store import DocumentNotFoundError
from oauth_relay.clients.sqlite_store import SQLiteStore


@pytest.fixture()
def store(tmp_path: Path) -> SQLiteStore:
    return SQLiteStore(str(tmp_path / "nested" / "relay.db"))


def test_put_get_delete(store: SQLiteStore) -> None:
    store.put("sessions", "s1", {"session_id": "abc", "completed": False})

    assert store.get("sessions", "s1") == {"session_id": "abc", "completed": False}
    assert store.get("rate_limits", "s1") is None

    store.delete("sessions", "s1")
    assert store.get("sessions", "s1") is None


def test_put_overwrites(store: SQLiteStore) -> None:
    store.put("rate_limits", "ip:authorize", {"count": 1})
    store.put("rate_limits", "ip:authorize", {"count": 2})

    assert store.get("rate_limits", "ip:authorize") == {"count": 2}


def test_update_merges_fields(store: SQLiteStore) -> None:
    store.put("sessions", "s1", {"session_id": "abc", "completed": False})

    store.update("sessions", "s1", {"completed": True, "access_token": "x"})

    assert store.get("sessions", "s1") == {
        "session_id": "abc",
        "completed": True,
        "access_token": "x",
    }


def test_update_missing_document_raises(store: SQLiteStore) -> None:
    with pytest.raises(DocumentNotFoundError):
        store.update("sessions", "ghost", {"completed": True})
    assert store.get("sessions", "ghost") is None


def test_query_matches_every_condition(store: SQLiteStore) -> None:
    store.put("sessions", "s1", {"session_id": "abc", "completed": False})
    store.put("sessions", "s2", {"session_id": "abc", "completed": True})
    store.put("sessions", "s3", {"session_id": "def", "completed": True})
    store.put("other", "s4", {"session_id": "abc", "completed": True})

    matches = store.query("sessions", where={"session_id": "abc", "completed": True})
    assert matches == [{"session_id": "abc", "completed": True}]

    assert len(store.query("sessions", where={"session_id": "abc"}, limit=5)) == 2
    assert store.query("sessions", where={"session_id": "zzz"}) == []


def test_delete_reports_whether_it_removed(store: SQLiteStore) -> None:
    store.put("sessions", "s1", {"session_id": "abc"})

    assert store.delete("sessions", "s1") is True
    assert store.delete("sessions", "s1") is False


def test_concurrent_deletes_have_one_winner(store: SQLiteStore) -> None:
    store.put("sessions", "s1", {"session_id": "abc", "completed": True})
    barrier = threading.Barrier(4, timeout=5)
    results: list[bool] = []

    def claim() -> None:
        store.query("sessions", where={"session_id": "abc"})
        barrier.wait()
        results.append(store.delete("sessions", "s1"))

    threads = [threading.Thread(target=claim) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(results) == [False, False, False, True]

from __future__ import annotations

from datetime import datetime, timezone

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from activity_cards.clients import SQLiteStore


@pytest.fixture
def store(tmp_path) -> SQLiteStore:
    return SQLiteStore(str(tmp_path / "nested" / "store.db"))


def _account(**overrides) -> dict:
    account = {
        "user_id": "42",
        "access_token_encrypted": "enc-access",
        "refresh_token_encrypted": "enc-refresh",
        "expires_at": 1_700_000_000,
        "scope": "read,activity:read_all",
        "athlete": {"id": 42, "firstname": "Ada"},
    }
    account.update(overrides)
    return account


def test_account_upsert_preserves_created_at_and_scope(store: SQLiteStore) -> None:
    store.put_account(_account(created_at="2024-01-01T00:00:00+00:00"))
    store.put_account(
        _account(access_token_encrypted="enc-new", scope=None, created_at="ignored")
    )

    account = store.get_account("42")
    assert account["access_token_encrypted"] == "enc-new"
    assert account["scope"] == "read,activity:read_all"
    assert account["created_at"] == "2024-01-01T00:00:00+00:00"
    assert account["athlete"] == {"id": 42, "firstname": "Ada"}


def test_put_account_requires_user_id(store: SQLiteStore) -> None:
    with pytest.raises(ValueError):
        store.put_account(_account(user_id=""))


def test_activity_cache_and_listing(store: SQLiteStore) -> None:
    store.put_activities("42", [{"id": 1, "name": "a"}, {"id": 2, "name": "b"}])
    store.put_activity_listing("42", 1, [2, 1])

    assert store.get_activity("42", 2) == {"id": 2, "name": "b"}
    assert store.get_activity("7", 2) is None

    ids, fetched_at = store.get_activity_listing("42", 1)
    assert ids == [2, 1]
    assert fetched_at <= datetime.now(timezone.utc)
    assert store.get_activity_listing("42", 2) is None


def test_detailed_flag_tracks_latest_payload(store: SQLiteStore) -> None:
    store.put_activities("42", [{"id": 1, "name": "a"}])
    assert store.get_activity("42", 1, detailed_only=True) is None

    store.put_activities("42", [{"id": 1, "name": "a", "calories": 640}], detailed=True)
    assert store.get_activity("42", 1, detailed_only=True)["calories"] == 640

    store.put_activities("42", [{"id": 1, "name": "renamed"}])
    assert store.get_activity("42", 1, detailed_only=True) is None
    assert store.get_activity("42", 1) == {"id": 1, "name": "renamed"}


def test_delete_account_clears_cache(store: SQLiteStore) -> None:
    store.put_account(_account())
    store.put_activities("42", [{"id": 1}])
    store.put_activity_listing("42", 1, [1])

    store.delete_account("42")

    assert store.get_account("42") is None
    assert store.get_activity("42", 1) is None
    assert store.get_activity_listing("42", 1) is None

"""SQLite persistence for connected accounts and cached activities."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Optional


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class SQLiteStore:
    """Stores one Strava account per user plus a per-user activity cache."""

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
                CREATE TABLE IF NOT EXISTS accounts (
                    user_id TEXT PRIMARY KEY,
                    provider TEXT NOT NULL,
                    access_token_encrypted TEXT NOT NULL,
                    refresh_token_encrypted TEXT NOT NULL,
                    expires_at INTEGER,
                    scope TEXT,
                    athlete TEXT NOT NULL DEFAULT '{}',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS activity_cache (
                    user_id TEXT NOT NULL,
                    activity_id INTEGER NOT NULL,
                    payload TEXT NOT NULL,
                    detailed INTEGER NOT NULL DEFAULT 0,
                    fetched_at TEXT NOT NULL,
                    PRIMARY KEY (user_id, activity_id)
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS activity_listings (
                    user_id TEXT NOT NULL,
                    page INTEGER NOT NULL,
                    activity_ids TEXT NOT NULL,
                    fetched_at TEXT NOT NULL,
                    PRIMARY KEY (user_id, page)
                )
                """
            )

    def put_account(self, account: Dict[str, Any]) -> None:
        user_id = account.get("user_id")
        if not user_id:
            raise ValueError("Account must include a 'user_id' key")

        now = _utcnow()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO accounts (
                    user_id, provider, access_token_encrypted, refresh_token_encrypted,
                    expires_at, scope, athlete, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    provider = excluded.provider,
                    access_token_encrypted = excluded.access_token_encrypted,
                    refresh_token_encrypted = excluded.refresh_token_encrypted,
                    expires_at = excluded.expires_at,
                    scope = COALESCE(excluded.scope, accounts.scope),
                    athlete = excluded.athlete,
                    updated_at = excluded.updated_at
                """,
                (
                    user_id,
                    account.get("provider", "strava"),
                    account["access_token_encrypted"],
                    account["refresh_token_encrypted"],
                    account.get("expires_at"),
                    account.get("scope"),
                    json.dumps(account.get("athlete") or {}),
                    account.get("created_at") or now,
                    account.get("updated_at") or now,
                ),
            )

    def get_account(self, user_id: str) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM accounts WHERE user_id = ?",
                (user_id,),
            ).fetchone()
        if not row:
            return None
        account = dict(row)
        account["athlete"] = json.loads(account["athlete"] or "{}")
        return account

    def delete_account(self, user_id: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM accounts WHERE user_id = ?", (user_id,))
        self.clear_activity_cache(user_id)

    def put_activities(
        self,
        user_id: str,
        activities: Iterable[Dict[str, Any]],
        *,
        detailed: bool = False,
    ) -> None:
        """Cache activity payloads.

        ``detailed`` marks payloads from the single-activity endpoint; listing
        payloads lack detail-only fields such as ``calories``.
        """
        now = _utcnow()
        rows = [
            (user_id, int(activity["id"]), json.dumps(activity), int(detailed), now)
            for activity in activities
        ]
        if not rows:
            return
        with self._connect() as conn:
            conn.executemany(
                """
                INSERT INTO activity_cache (user_id, activity_id, payload, detailed, fetched_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(user_id, activity_id) DO UPDATE SET
                    payload = excluded.payload,
                    detailed = excluded.detailed,
                    fetched_at = excluded.fetched_at
                """,
                rows,
            )

    def get_activity(
        self, user_id: str, activity_id: int, *, detailed_only: bool = False
    ) -> Optional[Dict[str, Any]]:
        query = "SELECT payload FROM activity_cache WHERE user_id = ? AND activity_id = ?"
        if detailed_only:
            query += " AND detailed = 1"
        with self._connect() as conn:
            row = conn.execute(query, (user_id, activity_id)).fetchone()
        if not row:
            return None
        return json.loads(row["payload"])

    def put_activity_listing(
        self, user_id: str, page: int, activity_ids: list[int]
    ) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO activity_listings (user_id, page, activity_ids, fetched_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(user_id, page) DO UPDATE SET
                    activity_ids = excluded.activity_ids,
                    fetched_at = excluded.fetched_at
                """,
                (user_id, page, json.dumps(activity_ids), _utcnow()),
            )

    def get_activity_listing(
        self, user_id: str, page: int
    ) -> Optional[tuple[list[int], datetime]]:
        """Return the cached activity ids for a page and when they were fetched."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT activity_ids, fetched_at FROM activity_listings "
                "WHERE user_id = ? AND page = ?",
                (user_id, page),
            ).fetchone()
        if not row:
            return None
        return json.loads(row["activity_ids"]), datetime.fromisoformat(row["fetched_at"])

    def clear_activity_cache(self, user_id: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM activity_cache WHERE user_id = ?", (user_id,))
            conn.execute("DELETE FROM activity_listings WHERE user_id = ?", (user_id,))


__all__ = ["SQLiteStore"]

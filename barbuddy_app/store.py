"""SQLite-backed storage for drinks, settings (profile, limit, preferences) and shares."""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from typing import Any

logger = logging.getLogger(__name__)


def init_db(db_path: str) -> None:
    with sqlite3.connect(db_path) as conn:
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS drinks (
                id TEXT PRIMARY KEY,
                drink_type TEXT NOT NULL,
                volume_oz REAL NOT NULL,
                abv_percent REAL NOT NULL,
                timestamp TEXT NOT NULL,
                cost REAL
            )
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS idx_drinks_timestamp ON drinks(timestamp)")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value_json TEXT NOT NULL,
                updated_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS shares (
                id TEXT PRIMARY KEY,
                drink_count REAL NOT NULL,
                drink_limit REAL NOT NULL,
                message TEXT NOT NULL,
                created_at TEXT NOT NULL,
                expires_at TEXT NOT NULL
            )
            """
        )
        conn.commit()


def _ts(value: datetime) -> str:
    return value.isoformat(timespec="seconds")


def insert_drink(db_path: str, drink: dict[str, Any]) -> None:
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            """
            INSERT INTO drinks (id, drink_type, volume_oz, abv_percent, timestamp, cost)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                drink["id"],
                drink["type"],
                float(drink["volume_oz"]),
                float(drink["abv_percent"]),
                drink["timestamp"],
                drink.get("cost"),
            ),
        )
        conn.commit()


def update_drink_cost(db_path: str, drink_id: str, cost: float | None) -> bool:
    with sqlite3.connect(db_path) as conn:
        cur = conn.execute("UPDATE drinks SET cost = ? WHERE id = ?", (cost, drink_id))
        conn.commit()
        return cur.rowcount > 0


def delete_drink(db_path: str, drink_id: str) -> bool:
    with sqlite3.connect(db_path) as conn:
        cur = conn.execute("DELETE FROM drinks WHERE id = ?", (drink_id,))
        conn.commit()
        return cur.rowcount > 0


def delete_all_drinks(db_path: str) -> int:
    with sqlite3.connect(db_path) as conn:
        cur = conn.execute("DELETE FROM drinks")
        conn.commit()
        return cur.rowcount


def delete_drinks_before(db_path: str, cutoff: datetime) -> int:
    with sqlite3.connect(db_path) as conn:
        cur = conn.execute("DELETE FROM drinks WHERE timestamp < ?", (_ts(cutoff),))
        conn.commit()
        return cur.rowcount


def list_drinks(db_path: str, *, since: datetime | None = None) -> list[dict[str, Any]]:
    with sqlite3.connect(db_path) as conn:
        conn.row_factory = sqlite3.Row
        if since is not None:
            rows = conn.execute(
                """
                SELECT id, drink_type, volume_oz, abv_percent, timestamp, cost
                FROM drinks
                WHERE timestamp >= ?
                ORDER BY timestamp ASC, rowid ASC
                """,
                (_ts(since),),
            ).fetchall()
        else:
            rows = conn.execute(
                """
                SELECT id, drink_type, volume_oz, abv_percent, timestamp, cost
                FROM drinks
                ORDER BY timestamp ASC, rowid ASC
                """
            ).fetchall()

    return [
        {
            "id": row["id"],
            "type": row["drink_type"],
            "volume_oz": row["volume_oz"],
            "abv_percent": row["abv_percent"],
            "timestamp": row["timestamp"],
            "cost": row["cost"],
        }
        for row in rows
    ]


def get_setting(db_path: str, key: str, default: Any = None) -> Any:
    with sqlite3.connect(db_path) as conn:
        conn.row_factory = sqlite3.Row
        row = conn.execute("SELECT value_json FROM settings WHERE key = ?", (key,)).fetchone()
    if row is None:
        return default
    try:
        return json.loads(row["value_json"])
    except json.JSONDecodeError:
        logger.warning("Ignoring unreadable setting %r", key)
        return default


def set_setting(db_path: str, key: str, value: Any) -> None:
    value_json = json.dumps(value, separators=(",", ":"), ensure_ascii=True)
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            """
            INSERT INTO settings (key, value_json, updated_at)
            VALUES (?, ?, datetime('now'))
            ON CONFLICT(key) DO UPDATE SET value_json = excluded.value_json, updated_at = excluded.updated_at
            """,
            (key, value_json),
        )
        conn.commit()


def insert_share(db_path: str, share: dict[str, Any]) -> None:
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            """
            INSERT INTO shares (id, drink_count, drink_limit, message, created_at, expires_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                share["id"],
                float(share["drink_count"]),
                float(share["drink_limit"]),
                share["message"],
                share["timestamp"],
                share["expires_at"],
            ),
        )
        conn.commit()


def list_shares(db_path: str) -> list[dict[str, Any]]:
    with sqlite3.connect(db_path) as conn:
        conn.row_factory = sqlite3.Row
        rows = conn.execute(
            """
            SELECT id, drink_count, drink_limit, message, created_at, expires_at
            FROM shares
            ORDER BY created_at ASC, rowid ASC
            """
        ).fetchall()
    return [
        {
            "id": row["id"],
            "drink_count": row["drink_count"],
            "drink_limit": row["drink_limit"],
            "message": row["message"],
            "timestamp": row["created_at"],
            "expires_at": row["expires_at"],
        }
        for row in rows
    ]


def delete_share(db_path: str, share_id: str) -> bool:
    with sqlite3.connect(db_path) as conn:
        cur = conn.execute("DELETE FROM shares WHERE id = ?", (share_id,))
        conn.commit()
        return cur.rowcount > 0


"""Bookmarked market ids."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection


def add_bookmark(conn: DuckDBPyConnection, market_id: int) -> None:
    """Bookmark a market. Re-adding keeps the original timestamp."""
    conn.execute(
        "INSERT INTO bookmarks (market_id, added_at) VALUES (?, ?) ON CONFLICT (market_id) DO NOTHING",
        [market_id, int(time.time() * 1000)],
    )


def remove_bookmark(conn: DuckDBPyConnection, market_id: int) -> bool:
    """Remove a bookmark. Returns False if it was not bookmarked."""
    if not is_bookmarked(conn, market_id):
        return False
    conn.execute("DELETE FROM bookmarks WHERE market_id = ?", [market_id])
    return True


def list_bookmarks(conn: DuckDBPyConnection) -> list[int]:
    """Bookmarked ids, oldest first."""
    rows = conn.execute("SELECT market_id FROM bookmarks ORDER BY added_at, market_id").fetchall()
    return [int(r[0]) for r in rows]


def is_bookmarked(conn: DuckDBPyConnection, market_id: int) -> bool:
    row = conn.execute("SELECT 1 FROM bookmarks WHERE market_id = ?", [market_id]).fetchone()
    return row is not None

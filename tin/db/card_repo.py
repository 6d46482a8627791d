"""Repository for the ``Card`` table, bound to one borrowed connection."""

from __future__ import annotations

import sqlite3
from typing import Any, Optional

_CARD_COLUMNS = "id, title, amount, lockedAmount, archived, createdAt, updatedAt, archivedAt"


class CardRepository:
    """Row access for cards. Callers own the transaction."""

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    # -- Create ----------------------------------------------------------------

    def insert(self, card_id: str, title: Optional[str], amount: float, now: str) -> None:
        self._conn.execute(
            """INSERT INTO Card (id, title, amount, createdAt, updatedAt)
               VALUES (?, ?, ?, ?, ?)""",
            (card_id, title, amount, now, now),
        )

    # -- Read ------------------------------------------------------------------

    def get(self, card_id: str) -> Optional[dict[str, Any]]:
        row = self._conn.execute(
            f"SELECT {_CARD_COLUMNS} FROM Card WHERE id = ?", (card_id,)
        ).fetchone()
        return dict(row) if row else None

    def exists(self, card_id: str) -> bool:
        row = self._conn.execute("SELECT 1 FROM Card WHERE id = ?", (card_id,)).fetchone()
        return row is not None

    def list_active(self) -> list[dict[str, Any]]:
        rows = self._conn.execute(
            f"""SELECT {_CARD_COLUMNS} FROM Card WHERE archived = 0
                ORDER BY createdAt DESC, rowid DESC"""
        ).fetchall()
        return [dict(r) for r in rows]

    def list_archived(self) -> list[dict[str, Any]]:
        rows = self._conn.execute(
            f"""SELECT {_CARD_COLUMNS} FROM Card WHERE archived = 1
                ORDER BY archivedAt DESC, rowid DESC"""
        ).fetchall()
        return [dict(r) for r in rows]

    def active_ids_created_before(self, cutoff: str) -> list[str]:
        rows = self._conn.execute(
            "SELECT id FROM Card WHERE archived = 0 AND createdAt <= ?", (cutoff,)
        ).fetchall()
        return [r["id"] for r in rows]

    # -- Update ----------------------------------------------------------------

    def update(self, card_id: str, title: Optional[str], amount: float, now: str) -> None:
        self._conn.execute(
            "UPDATE Card SET title = ?, amount = ?, updatedAt = ? WHERE id = ?",
            (title, amount, now, card_id),
        )

    def set_amount(self, card_id: str, amount: float, now: str) -> None:
        self._conn.execute(
            "UPDATE Card SET amount = ?, updatedAt = ? WHERE id = ?",
            (amount, now, card_id),
        )

    def archive(self, card_id: str, now: str) -> None:
        self._conn.execute(
            "UPDATE Card SET archived = 1, archivedAt = ?, updatedAt = ? WHERE id = ?",
            (now, now, card_id),
        )

    def unarchive(self, card_id: str, now: str) -> None:
        self._conn.execute(
            "UPDATE Card SET archived = 0, archivedAt = NULL, updatedAt = ? WHERE id = ?",
            (now, card_id),
        )

    # -- Delete ----------------------------------------------------------------

    def delete(self, card_id: str) -> bool:
        """Hard delete; todos cascade and search rows go via triggers."""
        cursor = self._conn.execute("DELETE FROM Card WHERE id = ?", (card_id,))
        return cursor.rowcount > 0

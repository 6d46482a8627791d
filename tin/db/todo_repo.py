"""Repository for the ``Todo`` table, bound to one borrowed connection."""

from __future__ import annotations

import sqlite3
from typing import Any, Optional

_TODO_COLUMNS = "id, cardId, title, amount, done, scheduledAt, orderIndex, createdAt, updatedAt"


class TodoRepository:
    """Row access for todos. Callers own the transaction."""

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    # -- Create ----------------------------------------------------------------

    def next_order_index(self, card_id: str) -> int:
        row = self._conn.execute(
            "SELECT COALESCE(MAX(orderIndex), 0) AS max_order FROM Todo WHERE cardId = ?",
            (card_id,),
        ).fetchone()
        return int(row["max_order"]) + 1

    def insert(
        self,
        todo_id: str,
        card_id: str,
        title: str,
        amount: Optional[float],
        scheduled_at: Optional[str],
        order_index: int,
        now: str,
    ) -> None:
        self._conn.execute(
            """INSERT INTO Todo
               (id, cardId, title, amount, done, scheduledAt, orderIndex, createdAt, updatedAt)
               VALUES (?, ?, ?, ?, 0, ?, ?, ?, ?)""",
            (todo_id, card_id, title, amount, scheduled_at, order_index, now, now),
        )

    # -- Read ------------------------------------------------------------------

    def get(self, todo_id: str) -> Optional[dict[str, Any]]:
        row = self._conn.execute(
            f"SELECT {_TODO_COLUMNS} FROM Todo WHERE id = ?", (todo_id,)
        ).fetchone()
        return dict(row) if row else None

    def list_for_card(self, card_id: str) -> list[dict[str, Any]]:
        rows = self._conn.execute(
            f"""SELECT {_TODO_COLUMNS} FROM Todo WHERE cardId = ?
                ORDER BY orderIndex ASC, createdAt ASC, rowid ASC""",
            (card_id,),
        ).fetchall()
        return [dict(r) for r in rows]

    # -- Update ----------------------------------------------------------------

    def update(
        self,
        todo_id: str,
        title: str,
        amount: Optional[float],
        done: bool,
        scheduled_at: Optional[str],
        order_index: int,
        now: str,
    ) -> None:
        self._conn.execute(
            """UPDATE Todo
               SET title = ?, amount = ?, done = ?, scheduledAt = ?, orderIndex = ?, updatedAt = ?
               WHERE id = ?""",
            (title, amount, int(done), scheduled_at, order_index, now, todo_id),
        )

    # -- Delete ----------------------------------------------------------------

    def delete(self, todo_id: str) -> bool:
        cursor = self._conn.execute("DELETE FROM Todo WHERE id = ?", (todo_id,))
        return cursor.rowcount > 0

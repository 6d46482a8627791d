"""Repository for the append-only ``ChangeLog`` table."""

from __future__ import annotations

import json
import sqlite3
from typing import Any

from tin.utils.clock import generate_id


class ChangeLogRepository:
    """Audit-trail repository. Rows are only ever inserted."""

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    def append(self, card_id: str, kind: str, payload: dict[str, Any], now: str) -> str:
        entry_id = generate_id()
        self._conn.execute(
            """INSERT INTO ChangeLog (id, cardId, kind, payload, createdAt)
               VALUES (?, ?, ?, ?, ?)""",
            (entry_id, card_id, kind, json.dumps(payload), now),
        )
        return entry_id

    def recent(self, limit: int) -> list[dict[str, Any]]:
        # rowid breaks ties between entries written in the same millisecond
        rows = self._conn.execute(
            """SELECT id, cardId, kind, payload, createdAt FROM ChangeLog
               ORDER BY createdAt DESC, rowid DESC LIMIT ?""",
            (limit,),
        ).fetchall()
        return [dict(r) for r in rows]

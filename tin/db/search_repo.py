"""Queries against the FTS5 ``search_index`` and the card date range."""

from __future__ import annotations

import sqlite3
from typing import Any


def build_prefix_query(terms: list[str]) -> str:
    """Quote each term and make it a prefix match: ``"gro"* "mil"*``."""
    return " ".join('"' + term.replace('"', '""') + '"*' for term in terms)


class SearchRepository:
    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    def match(self, terms: list[str], limit: int) -> list[dict[str, Any]]:
        rows = self._conn.execute(
            """SELECT card_id, todo_id, card_title, todo_title,
                      snippet(search_index, 4, '<b>', '</b>', '...', 32) AS snippet
               FROM search_index WHERE search_index MATCH ?
               ORDER BY rank LIMIT ?""",
            (build_prefix_query(terms), limit),
        ).fetchall()
        return [dict(r) for r in rows]

    def cards_created_between(self, after: str, before: str, limit: int) -> list[dict[str, Any]]:
        rows = self._conn.execute(
            """SELECT id AS card_id, NULL AS todo_id, title AS card_title,
                      NULL AS todo_title, '' AS snippet
               FROM Card WHERE createdAt >= ? AND createdAt <= ? LIMIT ?""",
            (after, before, limit),
        ).fetchall()
        return [dict(r) for r in rows]

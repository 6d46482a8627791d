"""Result shapes returned by search and mutating operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from tin.models.card import CardDto
from tin.models.todo import TodoDto


@dataclass
class SearchResultDto:
    card_id: str
    todo_id: Optional[str]
    card_title: Optional[str]
    todo_title: Optional[str]
    snippet: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "card_id": self.card_id,
            "todo_id": self.todo_id,
            "card_title": self.card_title,
            "todo_title": self.todo_title,
            "snippet": self.snippet,
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "SearchResultDto":
        return cls(
            card_id=row["card_id"],
            todo_id=row.get("todo_id"),
            card_title=row.get("card_title"),
            todo_title=row.get("todo_title"),
            snippet=row.get("snippet") or "",
        )


@dataclass
class AddTodoResult:
    """The new todo plus its card, whose balance changed as a side effect."""

    todo: TodoDto
    updated_card: CardDto

    def to_dict(self) -> dict[str, Any]:
        return {"todo": self.todo.to_dict(), "updated_card": self.updated_card.to_dict()}


@dataclass
class OkResponse:
    ok: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {"ok": self.ok}


@dataclass
class ArchiveResult:
    archived_count: int

    def to_dict(self) -> dict[str, Any]:
        return {"archived_count": self.archived_count}

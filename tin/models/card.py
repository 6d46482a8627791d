"""Card transfer objects: a budget envelope with a monetary balance."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from tin.models.todo import TodoDto
from tin.utils.amount import format_amount, format_optional_amount


@dataclass
class CardDto:
    """A card as seen by callers; amounts are six-decimal strings."""

    id: str
    title: Optional[str]
    amount: str
    locked_amount: Optional[str]
    archived: bool
    created_at: str
    updated_at: str
    archived_at: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "amount": self.amount,
            "locked_amount": self.locked_amount,
            "archived": self.archived,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "archived_at": self.archived_at,
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "CardDto":
        return cls(
            id=row["id"],
            title=row.get("title"),
            amount=format_amount(row["amount"]),
            locked_amount=format_optional_amount(row.get("lockedAmount")),
            archived=bool(row.get("archived", 0)),
            created_at=row["createdAt"],
            updated_at=row["updatedAt"],
            archived_at=row.get("archivedAt"),
        )


@dataclass
class CardWithTodosDto(CardDto):
    """A card together with its todos in display order."""

    todos: list[TodoDto] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["todos"] = [t.to_dict() for t in self.todos]
        return data

    @classmethod
    def from_card(cls, card: CardDto, todos: list[TodoDto]) -> "CardWithTodosDto":
        return cls(**card.to_dict(), todos=todos)

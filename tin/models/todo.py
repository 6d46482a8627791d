"""Todo transfer object: a line item that may debit its card."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from tin.utils.amount import format_optional_amount


@dataclass
class TodoDto:
    id: str
    card_id: str
    title: str
    amount: Optional[str]
    done: bool
    scheduled_at: Optional[str]
    order_index: int
    created_at: str
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "card_id": self.card_id,
            "title": self.title,
            "amount": self.amount,
            "done": self.done,
            "scheduled_at": self.scheduled_at,
            "order_index": self.order_index,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "TodoDto":
        return cls(
            id=row["id"],
            card_id=row["cardId"],
            title=row["title"],
            amount=format_optional_amount(row.get("amount")),
            done=bool(row.get("done", 0)),
            scheduled_at=row.get("scheduledAt"),
            order_index=row.get("orderIndex", 0),
            created_at=row["createdAt"],
            updated_at=row["updatedAt"],
        )

"""ChangeLog entries: the append-only audit trail of card mutations."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ChangeKind(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    TODO_ADDED = "todo_added"
    TODO_UPDATED = "todo_updated"
    TODO_DELETED = "todo_deleted"
    ARCHIVED = "archived"
    UNARCHIVED = "unarchived"


class ArchiveReason(str, Enum):
    USER_ARCHIVE = "user_archive"
    USER_UNARCHIVE = "user_unarchive"
    AUTO_ARCHIVE = "auto_archive_30_days"


@dataclass
class ChangeLogDto:
    id: str
    card_id: str
    kind: str
    payload: Any = field(default_factory=dict)
    created_at: str = ""

    @staticmethod
    def parse_payload(raw: Optional[str]) -> Any:
        """Decode a stored payload; anything malformed becomes ``{}``."""
        if not raw:
            return {}
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            return {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "card_id": self.card_id,
            "kind": self.kind,
            "payload": self.payload,
            "created_at": self.created_at,
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ChangeLogDto":
        return cls(
            id=row["id"],
            card_id=row["cardId"],
            kind=row["kind"],
            payload=cls.parse_payload(row.get("payload")),
            created_at=row["createdAt"],
        )

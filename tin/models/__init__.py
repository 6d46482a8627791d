"""Transfer objects returned by ledger operations."""

from tin.models.card import CardDto, CardWithTodosDto
from tin.models.changelog import ArchiveReason, ChangeKind, ChangeLogDto
from tin.models.results import AddTodoResult, ArchiveResult, OkResponse, SearchResultDto
from tin.models.todo import TodoDto

__all__ = [
    "CardDto", "CardWithTodosDto",
    "TodoDto",
    "ChangeKind", "ArchiveReason", "ChangeLogDto",
    "SearchResultDto", "AddTodoResult", "OkResponse", "ArchiveResult",
]

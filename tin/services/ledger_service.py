"""
Ledger service: the command set over cards, todos and the change log.

Every public method is one unit of work executed inside a single borrow of
the :class:`~tin.db.database.Database`. Mutations run in one transaction and
append their ChangeLog row in that same transaction, so a failure at any
step leaves no partial effect.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from tin.db.card_repo import CardRepository
from tin.db.changelog_repo import ChangeLogRepository
from tin.db.database import Database
from tin.db.search_repo import SearchRepository
from tin.db.todo_repo import TodoRepository
from tin.errors import CardNotFound, TodoNotFound
from tin.models import (
    AddTodoResult,
    ArchiveReason,
    ArchiveResult,
    CardDto,
    CardWithTodosDto,
    ChangeKind,
    ChangeLogDto,
    OkResponse,
    SearchResultDto,
    TodoDto,
)
from tin.utils.amount import (
    format_amount,
    parse_amount,
    parse_optional_amount,
    to_storage,
)
from tin.utils.clock import days_ago_iso, generate_id, now_iso

logger = logging.getLogger(__name__)

DEFAULT_ARCHIVE_AFTER_DAYS = 30
DEFAULT_SEARCH_LIMIT = 50
DEFAULT_RECENT_CHANGES_LIMIT = 50


@dataclass
class SearchQuery:
    """A search string split into free-text terms and optional date bounds."""

    terms: list[str] = field(default_factory=list)
    after: Optional[str] = None
    before: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.terms and self.after is None and self.before is None

    @classmethod
    def parse(cls, query: str) -> "SearchQuery":
        parsed = cls()
        for token in query.split():
            if token.startswith("after:"):
                parsed.after = token[len("after:"):]
            elif token.startswith("before:"):
                parsed.before = token[len("before:"):]
            else:
                parsed.terms.append(token)
        return parsed


def _as_decimal(value: Optional[float]) -> Decimal:
    return Decimal(repr(value)) if value is not None else Decimal(0)


class LedgerService:
    """Invariant-preserving operations over the ledger store."""

    def __init__(
        self,
        db: Database,
        *,
        archive_after_days: int = DEFAULT_ARCHIVE_AFTER_DAYS,
        search_limit: int = DEFAULT_SEARCH_LIMIT,
        recent_changes_limit: int = DEFAULT_RECENT_CHANGES_LIMIT,
        rebalance_todo_amounts: bool = False,
    ):
        self._db = db
        self.archive_after_days = archive_after_days
        self.search_limit = search_limit
        self.recent_changes_limit = recent_changes_limit
        # Off: a todo's deduction is permanent regardless of later edits/deletes.
        self.rebalance_todo_amounts = rebalance_todo_amounts

    @classmethod
    def from_settings(cls, db: Database, settings: Any) -> "LedgerService":
        return cls(
            db,
            archive_after_days=settings.ARCHIVE_AFTER_DAYS,
            search_limit=settings.SEARCH_LIMIT,
            recent_changes_limit=settings.RECENT_CHANGES_LIMIT,
            rebalance_todo_amounts=settings.REBALANCE_TODO_AMOUNTS,
        )

    # -- helpers ---------------------------------------------------------------

    @staticmethod
    def _require_card(cards: CardRepository, card_id: str) -> dict[str, Any]:
        row = cards.get(card_id)
        if row is None:
            raise CardNotFound(card_id)
        return row

    @staticmethod
    def _require_todo(todos: TodoRepository, todo_id: str) -> dict[str, Any]:
        row = todos.get(todo_id)
        if row is None:
            raise TodoNotFound(todo_id)
        return row

    # -- Cards: read -----------------------------------------------------------

    def list_cards(self) -> list[CardDto]:
        with self._db.read() as conn:
            return [CardDto.from_row(r) for r in CardRepository(conn).list_active()]

    def list_archived_cards(self) -> list[CardDto]:
        with self._db.read() as conn:
            return [CardDto.from_row(r) for r in CardRepository(conn).list_archived()]

    def get_card(self, card_id: str) -> CardWithTodosDto:
        with self._db.read() as conn:
            card = CardDto.from_row(self._require_card(CardRepository(conn), card_id))
            todos = [TodoDto.from_row(r) for r in TodoRepository(conn).list_for_card(card_id)]
        return CardWithTodosDto.from_card(card, todos)

    # -- Cards: write ----------------------------------------------------------

    def create_card(self, title: Optional[str], amount: str) -> CardDto:
        value = parse_amount(amount)
        card_id = generate_id()
        now = now_iso()

        with self._db.write() as conn:
            cards = CardRepository(conn)
            cards.insert(card_id, title, to_storage(value), now)
            ChangeLogRepository(conn).append(
                card_id, ChangeKind.CREATED.value, {"title": title, "amount": amount}, now
            )
            row = cards.get(card_id)

        logger.info(f"Created card {card_id}")
        return CardDto.from_row(row)

    def update_card(
        self,
        card_id: str,
        title: Optional[str] = None,
        amount: Optional[str] = None,
    ) -> CardDto:
        now = now_iso()

        with self._db.write() as conn:
            cards = CardRepository(conn)
            existing = self._require_card(cards, card_id)

            new_title = title if title is not None else existing["title"]
            if amount is not None:
                new_amount = to_storage(parse_amount(amount))
            else:
                new_amount = existing["amount"]

            cards.update(card_id, new_title, new_amount, now)
            ChangeLogRepository(conn).append(
                card_id,
                ChangeKind.UPDATED.value,
                {"title": new_title, "amount": format_amount(new_amount)},
                now,
            )
            row = cards.get(card_id)

        logger.info(f"Updated card {card_id}")
        return CardDto.from_row(row)

    def delete_card(self, card_id: str) -> OkResponse:
        # No ChangeLog row: the audit trail does not record card deletion.
        with self._db.write() as conn:
            deleted = CardRepository(conn).delete(card_id)
        if deleted:
            logger.info(f"Deleted card {card_id}")
        return OkResponse(ok=True)

    # -- Todos -----------------------------------------------------------------

    def add_todo(
        self,
        card_id: str,
        title: str,
        amount: Optional[str] = None,
        use_current_time: bool = False,
        scheduled_at: Optional[str] = None,
    ) -> AddTodoResult:
        """Add a todo and debit its amount from the card in one transaction."""
        todo_amount = parse_optional_amount(amount)
        todo_id = generate_id()
        now = now_iso()
        actual_scheduled_at = now if use_current_time else scheduled_at

        with self._db.write() as conn:
            cards = CardRepository(conn)
            todos = TodoRepository(conn)

            current = self._require_card(cards, card_id)["amount"]
            new_card_amount = to_storage(_as_decimal(current) - (todo_amount or Decimal(0)))
            cards.set_amount(card_id, new_card_amount, now)

            order_index = todos.next_order_index(card_id)
            todos.insert(
                todo_id, card_id, title, to_storage(todo_amount),
                actual_scheduled_at, order_index, now,
            )

            ChangeLogRepository(conn).append(
                card_id,
                ChangeKind.TODO_ADDED.value,
                {
                    "todo_id": todo_id,
                    "title": title,
                    "amount": amount,
                    "card_amount_change": (
                        f"{format_amount(current)} -> {format_amount(new_card_amount)}"
                    ),
                },
                now,
            )
            todo_row = todos.get(todo_id)
            card_row = cards.get(card_id)

        logger.info(f"Added todo {todo_id} to card {card_id}")
        return AddTodoResult(todo=TodoDto.from_row(todo_row), updated_card=CardDto.from_row(card_row))

    def update_todo(
        self,
        todo_id: str,
        title: Optional[str] = None,
        amount: Optional[str] = None,
        done: Optional[bool] = None,
        scheduled_at: Optional[str] = None,
        order_index: Optional[int] = None,
    ) -> TodoDto:
        now = now_iso()

        with self._db.write() as conn:
            todos = TodoRepository(conn)
            existing = self._require_todo(todos, todo_id)
            card_id = existing["cardId"]

            new_title = title if title is not None else existing["title"]
            if amount is not None:
                new_amount = to_storage(parse_amount(amount))
            else:
                new_amount = existing["amount"]
            new_done = done if done is not None else bool(existing["done"])
            new_scheduled_at = scheduled_at if scheduled_at is not None else existing["scheduledAt"]
            new_order_index = order_index if order_index is not None else existing["orderIndex"]

            todos.update(
                todo_id, new_title, new_amount, new_done,
                new_scheduled_at, new_order_index, now,
            )

            if self.rebalance_todo_amounts and new_amount != existing["amount"]:
                delta = _as_decimal(existing["amount"]) - _as_decimal(new_amount)
                self._adjust_card(CardRepository(conn), card_id, delta, now)

            ChangeLogRepository(conn).append(
                card_id,
                ChangeKind.TODO_UPDATED.value,
                {"todo_id": todo_id, "title": new_title, "done": new_done},
                now,
            )
            row = todos.get(todo_id)

        logger.info(f"Updated todo {todo_id}")
        return TodoDto.from_row(row)

    def delete_todo(self, todo_id: str) -> OkResponse:
        now = now_iso()

        with self._db.write() as conn:
            todos = TodoRepository(conn)
            existing = self._require_todo(todos, todo_id)
            card_id = existing["cardId"]

            todos.delete(todo_id)

            if self.rebalance_todo_amounts and existing["amount"] is not None:
                self._adjust_card(
                    CardRepository(conn), card_id, _as_decimal(existing["amount"]), now
                )

            ChangeLogRepository(conn).append(
                card_id,
                ChangeKind.TODO_DELETED.value,
                {"todo_id": todo_id, "title": existing["title"]},
                now,
            )

        logger.info(f"Deleted todo {todo_id}")
        return OkResponse(ok=True)

    def _adjust_card(self, cards: CardRepository, card_id: str, delta: Decimal, now: str) -> None:
        current = self._require_card(cards, card_id)["amount"]
        cards.set_amount(card_id, to_storage(_as_decimal(current) + delta), now)

    # -- Search & history ------------------------------------------------------

    def search(self, query: str) -> list[SearchResultDto]:
        """
        Full-text prefix search plus an optional ``after:``/``before:`` range.

        Free-text hits come first, ranked by relevance; when both date bounds
        are given the cards created in that range are appended. The two sets
        are concatenated as-is.
        """
        parsed = SearchQuery.parse(query)
        if parsed.is_empty:
            return []

        results: list[SearchResultDto] = []
        with self._db.read() as conn:
            repo = SearchRepository(conn)
            if parsed.terms:
                results.extend(
                    SearchResultDto.from_row(r) for r in repo.match(parsed.terms, self.search_limit)
                )
            if parsed.after is not None and parsed.before is not None:
                results.extend(
                    SearchResultDto.from_row(r)
                    for r in repo.cards_created_between(parsed.after, parsed.before, self.search_limit)
                )
        return results

    def recent_changes(self, limit: Optional[int] = None) -> list[ChangeLogDto]:
        limit = self.recent_changes_limit if limit is None else max(limit, 0)
        with self._db.read() as conn:
            rows = ChangeLogRepository(conn).recent(limit)
        return [ChangeLogDto.from_row(r) for r in rows]

    # -- Archival --------------------------------------------------------------

    def archive_card(self, card_id: str) -> CardDto:
        return self._set_archived(card_id, archived=True)

    def unarchive_card(self, card_id: str) -> CardDto:
        return self._set_archived(card_id, archived=False)

    def _set_archived(self, card_id: str, archived: bool) -> CardDto:
        now = now_iso()

        with self._db.write() as conn:
            cards = CardRepository(conn)
            if not cards.exists(card_id):
                raise CardNotFound(card_id)

            if archived:
                cards.archive(card_id, now)
                kind, reason = ChangeKind.ARCHIVED, ArchiveReason.USER_ARCHIVE
            else:
                cards.unarchive(card_id, now)
                kind, reason = ChangeKind.UNARCHIVED, ArchiveReason.USER_UNARCHIVE

            ChangeLogRepository(conn).append(card_id, kind.value, {"reason": reason.value}, now)
            row = cards.get(card_id)

        logger.info(f"{kind.value.capitalize()} card {card_id}")
        return CardDto.from_row(row)

    def archive_old_cards(self, now: Optional[datetime] = None) -> ArchiveResult:
        """Archive every active card created at or before the age threshold."""
        stamp = now_iso(now)
        cutoff = days_ago_iso(self.archive_after_days, now)

        with self._db.write() as conn:
            cards = CardRepository(conn)
            changelog = ChangeLogRepository(conn)
            card_ids = cards.active_ids_created_before(cutoff)
            for card_id in card_ids:
                cards.archive(card_id, stamp)
                changelog.append(
                    card_id,
                    ChangeKind.ARCHIVED.value,
                    {"reason": ArchiveReason.AUTO_ARCHIVE.value},
                    stamp,
                )

        return ArchiveResult(archived_count=len(card_ids))

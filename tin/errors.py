"""Error taxonomy surfaced by every ledger operation.

Callers receive one of these classes; ``str(error)`` is the stringified
classification handed back to the host shell.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for all classified ledger failures."""

    prefix = "Ledger error"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"{self.prefix}: {detail}")


class DatabaseError(LedgerError):
    """Any underlying store failure. ``__cause__`` holds the sqlite3 error."""

    prefix = "Database error"

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(str(cause))


class CardNotFound(LedgerError):
    prefix = "Card not found"

    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(card_id)


class TodoNotFound(LedgerError):
    prefix = "Todo not found"

    def __init__(self, todo_id: str):
        self.todo_id = todo_id
        super().__init__(todo_id)


class InvalidAmount(LedgerError):
    prefix = "Invalid amount"

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(raw)


class InternalError(LedgerError):
    """Store not initialized, lock poisoned, or another broken invariant."""

    prefix = "Internal error"

"""Service layer: ledger operations and the archival scheduler."""

from tin.services.archiver import ArchivalScheduler
from tin.services.ledger_service import LedgerService, SearchQuery

__all__ = ["LedgerService", "SearchQuery", "ArchivalScheduler"]

"""Tests for card archival and the recurring archival scheduler."""

from __future__ import annotations

import time
import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from tin.db.database import Database
from tin.errors import CardNotFound, DatabaseError
from tin.models import ArchiveResult
from tin.services.archiver import JOB_ID, ArchivalScheduler
from tin.services.ledger_service import LedgerService
from tin.utils.clock import format_iso


def _insert_aged_card(db: Database, card_id: str, age_days: float, archived: int = 0) -> None:
    created = format_iso(datetime.now(timezone.utc) - timedelta(days=age_days))
    with db.write() as conn:
        conn.execute(
            """INSERT INTO Card (id, title, amount, archived, createdAt, updatedAt)
               VALUES (?, ?, 10, ?, ?, ?)""",
            (card_id, card_id, archived, created, created),
        )


class TestManualArchive(unittest.TestCase):
    def setUp(self):
        self.db = Database.in_memory()
        self.ledger = LedgerService(self.db)

    def tearDown(self):
        self.db.close()

    def test_archive_and_unarchive_round_trip(self):
        card = self.ledger.create_card("Card", "1")

        archived = self.ledger.archive_card(card.id)
        self.assertTrue(archived.archived)
        self.assertIsNotNone(archived.archived_at)
        self.assertNotIn(card.id, [c.id for c in self.ledger.list_cards()])
        self.assertIn(card.id, [c.id for c in self.ledger.list_archived_cards()])
        self.assertEqual(self.ledger.recent_changes(1)[0].payload, {"reason": "user_archive"})

        restored = self.ledger.unarchive_card(card.id)
        self.assertFalse(restored.archived)
        self.assertIsNone(restored.archived_at)
        self.assertIn(card.id, [c.id for c in self.ledger.list_cards()])
        self.assertEqual(self.ledger.list_archived_cards(), [])
        self.assertEqual(self.ledger.recent_changes(1)[0].payload, {"reason": "user_unarchive"})

    def test_archived_list_most_recent_first(self):
        a = self.ledger.create_card("A", "1")
        b = self.ledger.create_card("B", "1")
        self.ledger.archive_card(a.id)
        self.ledger.archive_card(b.id)
        self.assertEqual([c.id for c in self.ledger.list_archived_cards()], [b.id, a.id])

    def test_missing_card(self):
        with self.assertRaises(CardNotFound):
            self.ledger.archive_card("nope")
        with self.assertRaises(CardNotFound):
            self.ledger.unarchive_card("nope")


class TestArchiveOldCards(unittest.TestCase):
    def setUp(self):
        self.db = Database.in_memory()
        self.ledger = LedgerService(self.db)

    def tearDown(self):
        self.db.close()

    def test_archives_eligible_cards_once(self):
        _insert_aged_card(self.db, "old-1", 45)
        _insert_aged_card(self.db, "old-2", 31)
        _insert_aged_card(self.db, "young", 10)
        _insert_aged_card(self.db, "already", 90, archived=1)

        first = self.ledger.archive_old_cards()
        self.assertEqual(first.archived_count, 2)
        self.assertEqual(self.ledger.archive_old_cards().archived_count, 0)

        self.assertEqual([c.id for c in self.ledger.list_cards()], ["young"])
        archived_ids = {c.id for c in self.ledger.list_archived_cards()}
        self.assertEqual(archived_ids, {"old-1", "old-2", "already"})

        auto = [c for c in self.ledger.recent_changes() if c.kind == "archived"]
        self.assertEqual(len(auto), 2)
        self.assertTrue(all(c.payload == {"reason": "auto_archive_30_days"} for c in auto))

    def test_zero_matches_is_not_an_error(self):
        self.ledger.create_card("Fresh", "1")
        self.assertEqual(self.ledger.archive_old_cards().archived_count, 0)
        self.assertEqual([c.kind for c in self.ledger.recent_changes()], ["created"])

    def test_reference_time_can_be_supplied(self):
        card = self.ledger.create_card("Fresh", "1")
        later = datetime.now(timezone.utc) + timedelta(days=31)
        self.assertEqual(self.ledger.archive_old_cards(now=later).archived_count, 1)
        self.assertTrue(self.ledger.get_card(card.id).archived)

    def test_threshold_is_configurable(self):
        ledger = LedgerService(self.db, archive_after_days=5)
        _insert_aged_card(self.db, "week-old", 7)
        self.assertEqual(ledger.archive_old_cards().archived_count, 1)


class TestArchivalScheduler(unittest.TestCase):
    def test_run_once_returns_count(self):
        service = MagicMock()
        service.archive_old_cards.return_value = ArchiveResult(archived_count=3)
        self.assertEqual(ArchivalScheduler(service).run_once(), 3)

    def test_failed_run_is_swallowed(self):
        service = MagicMock()
        service.archive_old_cards.side_effect = DatabaseError(RuntimeError("disk full"))
        scheduler = ArchivalScheduler(service)
        with self.assertLogs("tin.services.archiver", level="WARNING") as logs:
            self.assertIsNone(scheduler.run_once())
        self.assertIn("Scheduled archive run failed", logs.output[0])

    def test_registers_one_interval_job(self):
        service = MagicMock()
        service.archive_old_cards.return_value = ArchiveResult(archived_count=0)
        scheduler = ArchivalScheduler(service, interval_seconds=3600)
        backend = scheduler.start()
        try:
            jobs = backend.get_jobs()
            self.assertEqual([job.id for job in jobs], [JOB_ID])
            self.assertEqual(jobs[0].trigger.interval.total_seconds(), 3600)
        finally:
            scheduler.stop()

    @pytest.mark.slow
    def test_runs_immediately_then_on_interval(self):
        service = MagicMock()
        service.archive_old_cards.side_effect = [
            DatabaseError(RuntimeError("locked")),
            ArchiveResult(archived_count=0),
            ArchiveResult(archived_count=1),
        ] + [ArchiveResult(archived_count=0)] * 100

        scheduler = ArchivalScheduler(service, interval_seconds=0.1)
        scheduler.start()
        self.assertTrue(scheduler.running)
        time.sleep(1.0)
        scheduler.stop()
        self.assertFalse(scheduler.running)
        # the first failure did not stop the cadence
        self.assertGreaterEqual(service.archive_old_cards.call_count, 3)

    def test_start_is_idempotent_while_running(self):
        service = MagicMock()
        service.archive_old_cards.return_value = ArchiveResult(archived_count=0)

        scheduler = ArchivalScheduler(service, interval_seconds=3600)
        first = scheduler.start()
        self.assertIs(scheduler.start(), first)
        time.sleep(0.3)
        scheduler.stop()
        service.archive_old_cards.assert_called_once_with()

    def test_stop_without_start(self):
        scheduler = ArchivalScheduler(MagicMock())
        scheduler.stop()
        self.assertFalse(scheduler.running)


if __name__ == "__main__":
    unittest.main()

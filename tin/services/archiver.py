"""Recurring background sweep that auto-archives old cards."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from tin.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 24 * 60 * 60
JOB_ID = "archive_old_cards"


class ArchivalScheduler:
    """
    Runs ``archive_old_cards`` once at start, then on a fixed interval.

    A failed run is logged and swallowed; the cadence continues. Missed ticks
    are coalesced into one run, never caught up.
    """

    def __init__(self, service: LedgerService, interval_seconds: float = DEFAULT_INTERVAL_SECONDS):
        self._service = service
        self.interval_seconds = interval_seconds
        self._scheduler: Optional[BackgroundScheduler] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def run_once(self) -> Optional[int]:
        """One sweep. Returns the archived count, or ``None`` if the run failed."""
        try:
            result = self._service.archive_old_cards()
        except Exception:
            logger.exception("Scheduled archive run failed")
            return None
        if result.archived_count > 0:
            logger.info(f"Archived {result.archived_count} old cards")
        return result.archived_count

    def start(self) -> BackgroundScheduler:
        """Start the sweep on a background thread. Idempotent while running."""
        if self.running:
            return self._scheduler

        scheduler = BackgroundScheduler(daemon=True, timezone=timezone.utc)
        scheduler.add_job(
            self.run_once,
            IntervalTrigger(seconds=self.interval_seconds),
            id=JOB_ID,
            next_run_time=datetime.now(timezone.utc),
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info(f"Archival scheduler started (interval {self.interval_seconds}s)")
        return scheduler

    def stop(self) -> None:
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Archival scheduler stopped")

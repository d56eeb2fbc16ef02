"""Periodic sync scheduling.

This module provides:
- SyncScheduler: Requests a sync every N minutes and on demand

Requests from several producers (the interval timer, a UI action, a push
notification) are deduplicated through the syncer's pending flag, so at
most one run is queued at any time. A request is only dropped from the
pending flag by the job that serves it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from feedsync.client.sync.types import SyncError

if TYPE_CHECKING:
    from feedsync.client.sync.syncer import DataSyncer

logger = logging.getLogger(__name__)

PERIODIC_JOB_ID = "periodic_sync"
SYNC_NOW_JOB_NAME = "Sync now"

# Delay before a request that found another pass running is served again
DEFER_SECONDS = 5.0


class SyncScheduler:
    """Runs a syncer periodically in a background thread."""

    def __init__(
        self,
        syncer: DataSyncer,
        interval_minutes: float = 30.0,
        defer_seconds: float = DEFER_SECONDS,
    ) -> None:
        """Initialize the scheduler.

        Args:
            syncer: Syncer to run.
            interval_minutes: Minutes between periodic sync requests.
            defer_seconds: Delay before re-serving a request that found a
                pass already running (for example a manual sync()).
        """
        self._syncer = syncer
        self._interval_minutes = interval_minutes
        self._defer_seconds = defer_seconds
        self._scheduler: BackgroundScheduler | None = None

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None

    def _sync_job(self) -> None:
        """Job function: serve pending requests until none is left.

        A request made while a pass runs is served by the same job right
        after the pass. If the running slot is held by someone else, the
        request is put back and served again after defer_seconds.
        """
        while self._syncer.take_pending():
            try:
                ran = self._syncer.sync()
            except SyncError:
                logger.exception("Scheduled sync failed")
                continue
            if not ran:
                logger.debug("Another sync is running, deferring request")
                self._defer()
                return

    def _defer(self) -> None:
        scheduler = self._scheduler
        if scheduler is None:
            return
        if self._syncer.set_enter_pending():
            self._queue_sync(scheduler, delay=self._defer_seconds)

    def _queue_sync(self, scheduler: BackgroundScheduler, delay: float = 0.0) -> None:
        # One-shot jobs get their own id, so a queued run is never skipped
        # because an earlier one is still executing.
        run_date = datetime.now(timezone.utc) + timedelta(seconds=delay)
        scheduler.add_job(
            self._sync_job,
            trigger=DateTrigger(run_date=run_date),
            name=SYNC_NOW_JOB_NAME,
            misfire_grace_time=None,
        )

    def request_sync(self) -> bool:
        """Queue a sync unless one is already pending.

        Returns:
            True if a run was queued, False if one was already pending.

        Raises:
            RuntimeError: If the scheduler is not started.
        """
        scheduler = self._scheduler
        if scheduler is None:
            raise RuntimeError("Scheduler is not started")
        if not self._syncer.set_enter_pending():
            logger.debug("Sync already pending, request ignored")
            return False

        self._queue_sync(scheduler)
        return True

    def start(self) -> None:
        """Start the scheduler."""
        if self._scheduler is not None:
            return  # Already running

        self._scheduler = BackgroundScheduler()
        self._scheduler.add_job(
            self.request_sync,
            trigger=IntervalTrigger(minutes=self._interval_minutes),
            id=PERIODIC_JOB_ID,
            name="Periodic sync",
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info("Sync scheduler started (every %s minutes)", self._interval_minutes)

    def stop(self) -> None:
        """Stop the scheduler.

        Queued runs are dropped with the scheduler, so the pending request
        they would have served is cleared.
        """
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            self._syncer.set_pending(False)
            logger.info("Sync scheduler stopped")

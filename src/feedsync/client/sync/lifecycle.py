"""Pending/running state machine of a syncer."""

from __future__ import annotations

import logging
import threading

from feedsync.client.sync.types import SyncerState

logger = logging.getLogger(__name__)


class SyncLifecycle:
    """Tracks whether a sync is requested and whether one is executing.

    Both flags live in a single SyncerState value guarded by one lock, so
    every check-and-set is atomic and readers always see a consistent pair.
    Only RUNNING is exclusive; PENDING is a hint for schedulers and is never
    cleared by a sync pass.
    """

    def __init__(self) -> None:
        self._state = SyncerState.IDLE
        self._lock = threading.Lock()

    @property
    def state(self) -> SyncerState:
        """Snapshot of the current state."""
        with self._lock:
            return self._state

    def is_pending(self) -> bool:
        with self._lock:
            return SyncerState.PENDING in self._state

    def set_pending(self, pending: bool) -> None:
        with self._lock:
            if pending:
                self._state |= SyncerState.PENDING
            else:
                self._state &= ~SyncerState.PENDING

    def set_enter_pending(self) -> bool:
        """Claim the pending flag.

        Returns:
            True if the flag went from unset to set, False if it was already set.
        """
        with self._lock:
            if SyncerState.PENDING in self._state:
                return False
            self._state |= SyncerState.PENDING
            return True

    def take_pending(self) -> bool:
        """Consume the pending flag.

        Returns:
            True if the flag was set (it is now cleared), False otherwise.
        """
        with self._lock:
            if SyncerState.PENDING not in self._state:
                return False
            self._state &= ~SyncerState.PENDING
            return True

    def is_running(self) -> bool:
        with self._lock:
            return SyncerState.RUNNING in self._state

    def try_enter_running(self) -> bool:
        """Claim the running slot.

        Returns:
            True if the caller now owns the slot, False if a sync is running.
        """
        with self._lock:
            if SyncerState.RUNNING in self._state:
                return False
            self._state |= SyncerState.RUNNING
            return True

    def leave_running(self) -> None:
        """Release the running slot."""
        with self._lock:
            if SyncerState.RUNNING not in self._state:
                logger.warning("Releasing running slot that was not held")
            self._state &= ~SyncerState.RUNNING

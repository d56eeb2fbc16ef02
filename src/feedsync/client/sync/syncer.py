"""Data syncer: runs a sync protocol at most once at a time.

This module provides:
- DataSyncer: Binds a SyncProtocol to a data store, a network profile,
  the shared transport and the auth provider

Lifecycle of one sync() call:
    1. Claim the running slot; return False if another pass holds it
    2. Run protocol.start_syncing(ctx), capturing any failure
    3. Run protocol.finish_syncing(ctx)
    4. Release the running slot
    5. Re-raise the captured failure as SyncError
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from feedsync.client.sync.lifecycle import SyncLifecycle
from feedsync.client.sync.query import QueryExecutor
from feedsync.client.sync.types import SyncContext, SyncError

if TYPE_CHECKING:
    from feedsync.client.api import HTTPClient
    from feedsync.client.auth import AuthProvider
    from feedsync.client.state import DataStore
    from feedsync.client.sync.types import ProgressListener, SyncerState, SyncProtocol
    from feedsync.core.types import NetworkConfig

logger = logging.getLogger(__name__)


class DataSyncer:
    """Mutual-exclusion envelope around one sync protocol.

    A syncer is created once and reused for many sync() calls. Any number
    of threads may call sync(); while a pass is executing, further calls
    return without doing anything.

    Usage:
        syncer = DataSyncer(
            FeedListProtocol(),
            store,
            NetworkConfig.ANY,
            client=client,
            auth_provider=provider,
        )
        if syncer.set_enter_pending():
            syncer.set_pending(False)
            syncer.sync()
    """

    def __init__(
        self,
        protocol: SyncProtocol,
        store: DataStore,
        network_config: NetworkConfig,
        *,
        client: HTTPClient,
        auth_provider: AuthProvider | None = None,
        listener: ProgressListener | None = None,
    ) -> None:
        """Initialize the syncer.

        Args:
            protocol: Protocol hooks run by sync().
            store: Data store owned by this syncer.
            network_config: Network profile the syncer runs on.
            client: Transport shared across syncers.
            auth_provider: Token source shared across syncers.
            listener: Optional progress listener.
        """
        self._protocol = protocol
        self._store = store
        self._network_config = network_config
        self._listener = listener
        self._lifecycle = SyncLifecycle()
        self._queries = QueryExecutor(client, auth_provider)
        self._https = store.is_https_connection()

    # === Accessors ===

    @property
    def store(self) -> DataStore:
        return self._store

    @property
    def network_config(self) -> NetworkConfig:
        return self._network_config

    @property
    def is_https_connection(self) -> bool:
        """HTTPS preference read from the data store at construction."""
        return self._https

    @property
    def queries(self) -> QueryExecutor:
        return self._queries

    @property
    def listener(self) -> ProgressListener | None:
        return self._listener

    def set_listener(self, listener: ProgressListener | None) -> None:
        self._listener = listener

    def notify_progress_changed(self, text: str, progress: int, max_progress: int) -> None:
        """Forward a progress update to the listener, if any."""
        listener = self._listener
        if listener is not None:
            listener.on_progress_changed(text, progress, max_progress)

    # === State ===

    @property
    def state(self) -> SyncerState:
        return self._lifecycle.state

    def is_pending(self) -> bool:
        return self._lifecycle.is_pending()

    def set_pending(self, pending: bool) -> None:
        self._lifecycle.set_pending(pending)

    def set_enter_pending(self) -> bool:
        """Atomically set pending if unset.

        Returns:
            True if this call set the flag, False if it was already set.
        """
        return self._lifecycle.set_enter_pending()

    def take_pending(self) -> bool:
        """Atomically clear pending if set.

        Returns:
            True if this call consumed a pending request.
        """
        return self._lifecycle.take_pending()

    def is_running(self) -> bool:
        return self._lifecycle.is_running()

    # === Sync ===

    def _make_context(self) -> SyncContext:
        return SyncContext(
            queries=self._queries,
            store=self._store,
            network_config=self._network_config,
            https=self._https,
            notify_progress=self.notify_progress_changed,
        )

    def sync(self) -> bool:
        """Run one sync pass unless one is already running.

        Returns:
            True if a pass ran, False if another pass held the running slot.

        Raises:
            SyncError: If the protocol body failed. Raised after
                finish_syncing() has run and the running slot is released.
        """
        if not self._lifecycle.try_enter_running():
            logger.debug("Sync already running, ignoring request")
            return False

        ctx = self._make_context()
        failure: Exception | None = None
        logger.info("Sync started (%s)", type(self._protocol).__name__)
        try:
            try:
                self._protocol.start_syncing(ctx)
            except Exception as e:
                failure = e
            finally:
                self._protocol.finish_syncing(ctx)
        finally:
            self._lifecycle.leave_running()

        if failure is None:
            logger.info("Sync finished")
            return True

        logger.warning("Sync failed: %s", failure)
        if isinstance(failure, SyncError):
            raise failure
        raise SyncError(f"Sync failed: {failure}") from failure

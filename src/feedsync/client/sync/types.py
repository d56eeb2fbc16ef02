"""Types for the sync module.

This module defines:
- SyncerState: Combined pending/running flags of a syncer
- SyncError / QueryError: Failures surfaced by sync() and by queries
- ProgressListener / SyncProtocol: Interfaces implemented by callers
- SyncContext: What a protocol body gets to work with
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Flag, auto
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable

    from feedsync.client.state import DataStore
    from feedsync.client.sync.query import QueryExecutor
    from feedsync.core.types import NetworkConfig


class SyncerState(Flag):
    """State of a syncer.

    PENDING and RUNNING are independent: PENDING | RUNNING means a pass is
    executing and another one has been requested.
    """

    IDLE = 0
    PENDING = auto()
    RUNNING = auto()


class SyncError(Exception):
    """The failure surfaced by one sync() invocation."""


class QueryError(SyncError):
    """An HTTP query failed (auth, transport, encoding or decoding)."""


class ProgressListener(Protocol):
    """Receives progress updates from a protocol body."""

    def on_progress_changed(self, message: str, current: int, maximum: int) -> None:
        """Called synchronously from the sync thread."""
        ...


@dataclass
class SyncContext:
    """Context passed to protocol hooks.

    Attributes:
        queries: Query façade bound to the shared transport and auth provider.
        store: Data store owned by the syncer.
        network_config: Network profile the syncer was created for.
        https: Whether queries should be built with HTTPS addresses.
        notify_progress: Forwards (message, current, maximum) to the listener.
    """

    queries: QueryExecutor
    store: DataStore
    network_config: NetworkConfig
    https: bool
    notify_progress: Callable[[str, int, int], None]


class SyncProtocol(Protocol):
    """Protocol steps of one sync pass.

    start_syncing() runs the body and may raise. finish_syncing() always
    runs afterwards, even when the body failed, and must not raise.
    """

    def start_syncing(self, ctx: SyncContext) -> None:
        """Run the protocol body."""
        ...

    def finish_syncing(self, ctx: SyncContext) -> None:
        """Clean up after the body, successful or not."""
        ...

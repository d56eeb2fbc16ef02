"""Sync module for feedsync.

This module provides:
- DataSyncer: At-most-one-concurrent-run envelope around a sync protocol
- SyncLifecycle: Pending/running state machine
- QueryExecutor: Authenticated HTTP queries returning bytes, streams or text
- materialize: Stream-to-text decoding with guaranteed close
- SyncScheduler: Periodic, deduplicated sync requests
"""

from feedsync.client.sync.content import READ_BUFFER_SIZE, materialize
from feedsync.client.sync.lifecycle import SyncLifecycle
from feedsync.client.sync.query import (
    Query,
    QueryDescriptor,
    QueryExecutor,
    build_request_url,
)
from feedsync.client.sync.scheduler import SyncScheduler
from feedsync.client.sync.syncer import DataSyncer
from feedsync.client.sync.types import (
    ProgressListener,
    QueryError,
    SyncContext,
    SyncerState,
    SyncError,
    SyncProtocol,
)

__all__ = [
    # Content
    "READ_BUFFER_SIZE",
    "materialize",
    # Lifecycle
    "SyncLifecycle",
    "SyncerState",
    # Queries
    "Query",
    "QueryDescriptor",
    "QueryExecutor",
    "build_request_url",
    # Syncer
    "DataSyncer",
    "ProgressListener",
    "SyncContext",
    "SyncProtocol",
    "SyncScheduler",
    # Errors
    "QueryError",
    "SyncError",
]

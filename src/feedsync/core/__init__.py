"""Core module - Shared configuration and types."""

from feedsync.core.config import (
    CONTENT_IO_BUFFER_SIZE,
    GLOBAL_ITEM_IDS_LIMIT,
    GLOBAL_ITEMS_LIMIT,
    ITEM_LIST_QUERY_LIMIT,
    TOKEN_EXPIRE_TIME,
    UNREAD_COUNT_LIMIT,
    ServerConfig,
)
from feedsync.core.types import NetworkConfig

__all__ = [
    # Config
    "CONTENT_IO_BUFFER_SIZE",
    "GLOBAL_ITEM_IDS_LIMIT",
    "GLOBAL_ITEMS_LIMIT",
    "ITEM_LIST_QUERY_LIMIT",
    "TOKEN_EXPIRE_TIME",
    "UNREAD_COUNT_LIMIT",
    "ServerConfig",
    # Types
    "NetworkConfig",
]

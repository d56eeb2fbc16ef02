"""Shared configuration for feedsync.

This module defines the server connection settings and the protocol tuning
constants consumed by concrete sync protocols.
"""

from __future__ import annotations

from dataclasses import dataclass

# Protocol tuning limits (used by sync protocols, not enforced by the core)
CONTENT_IO_BUFFER_SIZE = 16384
UNREAD_COUNT_LIMIT = 500
GLOBAL_ITEMS_LIMIT = 300
GLOBAL_ITEM_IDS_LIMIT = 600
ITEM_LIST_QUERY_LIMIT = 20

# Seconds an auth token is considered fresh
TOKEN_EXPIRE_TIME = 2 * 60.0

DEFAULT_USER_AGENT = "feedsync/0.1"


@dataclass
class ServerConfig:
    """Configuration for connecting to a feed-reading service.

    Attributes:
        server_url: Base URL of the service (e.g., "https://reader.example.com").
        timeout: Request/connection timeout in seconds.
        verify_ssl: Whether to verify SSL certificates (default True).
        auth_header_format: Template for the Authorization header value.
        user_agent: User-Agent sent with every request.
    """

    server_url: str
    timeout: float = 30.0
    verify_ssl: bool = True
    auth_header_format: str = "Bearer {token}"
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        """Normalize server URL."""
        self.server_url = self.server_url.rstrip("/")

    @property
    def is_secure(self) -> bool:
        """Check if using HTTPS.

        Returns:
            True if server uses HTTPS.
        """
        return self.server_url.startswith("https://")

    def render_auth_header(self, token: str) -> str:
        """Render the Authorization header value for a token."""
        return self.auth_header_format.format(token=token)

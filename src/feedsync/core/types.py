"""Shared types for feedsync."""

from __future__ import annotations

from enum import Enum


class NetworkConfig(str, Enum):
    """Network profile a syncer is allowed to run on.

    Selected when a syncer is constructed; concrete protocols decide
    what to skip on metered connections.
    """

    ANY = "any"
    WIFI_ONLY = "wifi_only"
    DISABLED = "disabled"

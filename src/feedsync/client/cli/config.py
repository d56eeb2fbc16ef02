"""Configuration utilities for the feedsync CLI.

This module provides shared configuration functions used across CLI commands.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

from feedsync.core.config import ServerConfig

# Keys accepted by 'feedsync config set'
CONFIG_KEYS = (
    "server_url",
    "timeout",
    "verify_ssl",
    "auth_header_format",
    "network_config",
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_config_dir() -> Path:
    """Get the configuration directory for feedsync.

    Returns:
        Path to ~/.feedsync.
    """
    return Path.home() / ".feedsync"


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


def get_state_db_path() -> Path:
    """Get the path to the data store database."""
    return get_config_dir() / "state.db"


def load_config() -> dict[str, str]:
    """Load configuration from config file."""
    config_file = get_config_file()
    if config_file.exists():
        return dict(json.loads(config_file.read_text()))
    return {}


def save_config(config: dict[str, str]) -> None:
    """Save configuration to config file."""
    config_file = get_config_file()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(json.dumps(config, indent=2))


def build_server_config(config: dict[str, str]) -> ServerConfig:
    """Build a ServerConfig from stored settings.

    Raises:
        KeyError: If server_url is not configured.
    """
    server_config = ServerConfig(server_url=config["server_url"])
    if config.get("timeout"):
        server_config.timeout = float(config["timeout"])
    if config.get("verify_ssl"):
        server_config.verify_ssl = config["verify_ssl"].lower() not in ("0", "false", "no")
    if config.get("auth_header_format"):
        server_config.auth_header_format = config["auth_header_format"]
    return server_config


def setup_logging(verbose: bool) -> None:
    """Send feedsync logs to stderr.

    Args:
        verbose: Log at DEBUG level instead of WARNING.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger("feedsync")
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

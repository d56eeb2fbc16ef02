"""Command-line interface for feedsync.

This module provides the main CLI entry point and assembles all commands.

Commands:
- config show / config set: Manage stored configuration
- login / logout: Manage the auth token in the OS keyring
- fetch: Run one query through a sync pass and print the response
"""

from __future__ import annotations

import click

from feedsync import __version__
from feedsync.client.cli.account import login, logout
from feedsync.client.cli.config import (
    get_config_dir,
    get_config_file,
    load_config,
    save_config,
    setup_logging,
)
from feedsync.client.cli.fetch import fetch
from feedsync.client.cli.settings import config_group


@click.group()
@click.version_option(__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """feedsync - Background sync for feed-reading services."""
    setup_logging(verbose)


cli.add_command(config_group)
cli.add_command(login)
cli.add_command(logout)
cli.add_command(fetch)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    "cli",
    "main",
    "get_config_dir",
    "get_config_file",
    "load_config",
    "save_config",
]

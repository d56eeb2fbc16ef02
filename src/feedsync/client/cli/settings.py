"""Configuration commands for feedsync CLI.

Commands:
- config show: Print the stored configuration
- config set: Change one configuration key
"""

from __future__ import annotations

import sys

import click

from feedsync.client.cli.config import CONFIG_KEYS, load_config, save_config
from feedsync.core.types import NetworkConfig


@click.group("config")
def config_group() -> None:
    """Show or change feedsync configuration."""


@config_group.command("show")
def show() -> None:
    """Print the stored configuration."""
    stored = load_config()
    if not stored:
        click.echo("No configuration stored. Run 'feedsync config set server_url URL'.")
        return
    for key in sorted(stored):
        click.echo(f"{key} = {stored[key]}")


@config_group.command("set")
@click.argument("key", type=click.Choice(CONFIG_KEYS))
@click.argument("value")
def set_value(key: str, value: str) -> None:
    """Set KEY to VALUE."""
    if key == "network_config":
        try:
            NetworkConfig(value)
        except ValueError:
            choices = ", ".join(c.value for c in NetworkConfig)
            click.echo(f"Error: network_config must be one of: {choices}", err=True)
            sys.exit(1)
    if key == "timeout":
        try:
            float(value)
        except ValueError:
            click.echo("Error: timeout must be a number of seconds", err=True)
            sys.exit(1)
    if key == "server_url":
        value = value.rstrip("/")

    stored = load_config()
    stored[key] = value
    save_config(stored)
    click.echo(f"{key} = {value}")

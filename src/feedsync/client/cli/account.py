"""Account commands for feedsync CLI.

Commands:
- login: Store an auth token in the OS keyring
- logout: Remove the stored auth token
"""

from __future__ import annotations

import sys

import click

from feedsync.client.auth import delete_keyring_token, store_keyring_token
from feedsync.client.cli.config import load_config


def _require_server_url() -> str:
    server_url = load_config().get("server_url")
    if not server_url:
        click.echo(
            "Error: No server configured. Run 'feedsync config set server_url URL' first.",
            err=True,
        )
        sys.exit(1)
    return server_url


@click.command()
@click.option("--token", default=None, help="Auth token (prompted if omitted).")
def login(token: str | None) -> None:
    """Store the auth token for the configured server."""
    server_url = _require_server_url()
    if token is None:
        token = click.prompt("Auth token", hide_input=True)
    if not token.strip():
        click.echo("Error: Token cannot be empty.", err=True)
        sys.exit(1)

    store_keyring_token(server_url, token.strip())
    click.echo(f"Token stored for {server_url}")


@click.command()
def logout() -> None:
    """Remove the stored auth token for the configured server."""
    server_url = _require_server_url()
    delete_keyring_token(server_url)
    click.echo(f"Token removed for {server_url}")

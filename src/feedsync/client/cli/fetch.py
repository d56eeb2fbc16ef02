"""Fetch command for feedsync CLI.

Commands:
- fetch: Run one query through a sync pass and print the response
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field

import click

from feedsync.client.cli.config import (
    build_server_config,
    get_state_db_path,
    load_config,
)
from feedsync.client.sync.query import Query
from feedsync.client.sync.types import SyncContext, SyncError


@dataclass
class FetchProtocol:
    """Sync protocol whose body issues a single text query."""

    query: Query
    post: bool = False
    result: str | None = None
    finished: bool = field(default=False, init=False)

    def start_syncing(self, ctx: SyncContext) -> None:
        ctx.notify_progress("Fetching", 0, 1)
        if self.post:
            self.result = ctx.queries.query_text_via_post(self.query)
        else:
            self.result = ctx.queries.query_text_via_get(self.query)
        ctx.notify_progress("Fetched", 1, 1)

    def finish_syncing(self, ctx: SyncContext) -> None:
        self.finished = True


class EchoProgressListener:
    """Prints progress updates to stderr."""

    def on_progress_changed(self, message: str, current: int, maximum: int) -> None:
        click.echo(f"[{current}/{maximum}] {message}", err=True)


def parse_params(values: tuple[str, ...]) -> tuple[tuple[str, str], ...]:
    """Parse repeated key=value options into ordered pairs.

    Raises:
        click.BadParameter: If a value has no '='.
    """
    pairs = []
    for value in values:
        name, sep, param = value.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected key=value, got {value!r}", param_hint="--param")
        pairs.append((name, param))
    return tuple(pairs)


@click.command()
@click.argument("address")
@click.option("--param", "-p", "params", multiple=True, help="Query parameter as key=value.")
@click.option("--post", is_flag=True, help="Send the parameters as a POST form body.")
@click.option("--no-auth", is_flag=True, help="Do not attach the stored auth token.")
@click.option("--progress", is_flag=True, help="Print progress to stderr.")
def fetch(
    address: str,
    params: tuple[str, ...],
    post: bool,
    no_auth: bool,
    progress: bool,
) -> None:
    """Query ADDRESS (absolute URL or server path) and print the response."""
    from feedsync.client.api import HTTPClient
    from feedsync.client.auth import TokenProvider, keyring_token_fetcher
    from feedsync.client.state import DataStore
    from feedsync.client.sync.syncer import DataSyncer
    from feedsync.core.types import NetworkConfig

    config = load_config()
    if not config.get("server_url"):
        click.echo(
            "Error: No server configured. Run 'feedsync config set server_url URL' first.",
            err=True,
        )
        sys.exit(1)

    query = Query(address=address, params=parse_params(params), requires_auth=not no_auth)
    protocol = FetchProtocol(query=query, post=post)
    try:
        network_config = NetworkConfig(config.get("network_config", NetworkConfig.ANY.value))
    except ValueError:
        click.echo(
            f"Error: Invalid network_config in configuration: {config['network_config']!r}",
            err=True,
        )
        sys.exit(1)
    auth_provider = TokenProvider(keyring_token_fetcher(config["server_url"]))

    with HTTPClient(build_server_config(config)) as client, DataStore(get_state_db_path()) as store:
        syncer = DataSyncer(
            protocol,
            store,
            network_config,
            client=client,
            auth_provider=auth_provider,
            listener=EchoProgressListener() if progress else None,
        )
        try:
            syncer.sync()
        except SyncError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    click.echo(protocol.result or "")

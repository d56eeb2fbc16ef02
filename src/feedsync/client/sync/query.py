"""Query descriptors and the HTTP query façade.

This module provides:
- QueryDescriptor: What the façade needs to know about a request
- Query: Immutable descriptor built from a host, path and parameters
- build_request_url: Address composition
- QueryExecutor: Authenticated GET/POST returning bytes, streams or text

Every failure raised while executing a query (building the descriptor,
fetching the auth token, talking to the server) reaches the caller as a
QueryError, so protocol bodies never deal with transport exception types.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, TypeVar
from urllib.parse import urlencode

from feedsync.client.auth import AuthError
from feedsync.client.sync.content import materialize
from feedsync.client.sync.types import QueryError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from feedsync.client.api import HTTPClient, ResponseStream
    from feedsync.client.auth import AuthProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")

PARAMS_SEPARATOR = "?"


class QueryDescriptor(Protocol):
    """Description of one logical request."""

    @property
    def address(self) -> str:
        """Target address without query string."""
        ...

    @property
    def params_string(self) -> str:
        """URL-encoded parameters, empty string if none."""
        ...

    @property
    def requires_auth(self) -> bool:
        """Whether an auth token must be attached."""
        ...


@dataclass(frozen=True)
class Query:
    """Immutable query descriptor.

    Attributes:
        address: Absolute URL or path relative to the server URL.
        params: Ordered (name, value) pairs; names may repeat.
        requires_auth: Whether an auth token must be attached.
    """

    address: str
    params: tuple[tuple[str, str], ...] = ()
    requires_auth: bool = True

    @property
    def params_string(self) -> str:
        return urlencode(self.params)

    @classmethod
    def build(
        cls,
        host: str,
        path: str,
        params: Mapping[str, object] | Iterable[tuple[str, object]] | None = None,
        *,
        requires_auth: bool = True,
        https: bool = True,
    ) -> Query:
        """Build a query for an absolute address.

        Args:
            host: Host name (optionally with port).
            path: Path on the host, with or without a leading slash.
            params: Mapping or sequence of pairs; values are stringified.
            requires_auth: Whether an auth token must be attached.
            https: Use https:// instead of http://.

        Returns:
            New Query.
        """
        scheme = "https" if https else "http"
        address = f"{scheme}://{host.strip('/')}/{path.lstrip('/')}"
        items = params.items() if isinstance(params, Mapping) else (params or ())
        pairs = tuple((str(name), str(value)) for name, value in items)
        return cls(address=address, params=pairs, requires_auth=requires_auth)


def build_request_url(address: str, params: str) -> str:
    """Append the parameter string to an address.

    The separator is only added for a non-empty parameter string.
    """
    if params:
        return f"{address}{PARAMS_SEPARATOR}{params}"
    return address


class QueryExecutor:
    """HTTP query façade used by protocol bodies.

    Usage:
        queries = QueryExecutor(client, auth_provider)
        text = queries.query_text_via_get(Query.build(host, "/reader/api/0/tag/list"))
    """

    def __init__(
        self,
        client: HTTPClient,
        auth_provider: AuthProvider | None = None,
    ) -> None:
        """Initialize the façade.

        Args:
            client: Shared transport client.
            auth_provider: Token source for queries that require auth.
        """
        self._client = client
        self._auth_provider = auth_provider

    def _authenticate(self) -> None:
        if self._auth_provider is None:
            raise AuthError("Query requires authentication but no auth provider is set")
        self._client.set_auth(self._auth_provider.blocking_fetch_token())

    def _execute(
        self,
        query: QueryDescriptor,
        perform: Callable[[str, str], T],
    ) -> T:
        """Authenticate, compose the address and run a transport call."""
        try:
            if query.requires_auth:
                self._authenticate()
            params = query.params_string
            url = build_request_url(query.address, params)
            return perform(url, params)
        except QueryError:
            raise
        except Exception as e:
            raise QueryError(f"Query failed: {e}") from e

    # === Bytes ===

    def query_bytes_via_get(self, query: QueryDescriptor) -> bytes:
        """GET a query and return the whole body."""
        return self._execute(query, lambda url, _params: self._client.get_bytes(url))

    def query_bytes_via_post(self, query: QueryDescriptor) -> bytes:
        """POST a query and return the whole body."""
        return self._execute(query, self._client.post_bytes)

    # === Streams ===

    def query_stream_via_get(self, query: QueryDescriptor) -> ResponseStream:
        """GET a query and return the body as a stream the caller must close."""
        return self._execute(query, lambda url, _params: self._client.get_stream(url))

    def query_stream_via_post(self, query: QueryDescriptor) -> ResponseStream:
        """POST a query and return the body as a stream the caller must close."""
        return self._execute(query, self._client.post_stream)

    # === Text ===

    def query_text_via_get(self, query: QueryDescriptor) -> str:
        """GET a query and decode the body as UTF-8."""
        return materialize(self.query_stream_via_get(query))

    def query_text_via_post(self, query: QueryDescriptor) -> str:
        """POST a query and decode the body as UTF-8."""
        return materialize(self.query_stream_via_post(query))

"""Tests for query descriptors and the HTTP query façade."""

from __future__ import annotations

from unittest.mock import MagicMock

import httpx
import pytest

from feedsync.client.api import APIError, HTTPClient, NetworkError
from feedsync.client.auth import AuthError, StaticTokenProvider
from feedsync.client.sync.query import Query, QueryExecutor, build_request_url
from feedsync.client.sync.types import QueryError, SyncError
from feedsync.core.config import ServerConfig


@pytest.fixture
def client() -> HTTPClient:
    """Create an HTTPClient bound to the mocked server."""
    c = HTTPClient(ServerConfig(server_url="http://test"))
    yield c
    c.close()


class BrokenQuery:
    """Descriptor whose address cannot be built."""

    requires_auth = False
    params_string = ""

    @property
    def address(self) -> str:
        raise ValueError("no host configured")


class TestBuildRequestUrl:
    """Tests for address composition."""

    def test_empty_params(self) -> None:
        """Should not add a trailing separator."""
        assert build_request_url("http://test/list", "") == "http://test/list"

    def test_params_appended(self) -> None:
        """Should join with exactly one separator."""
        assert build_request_url("http://test/list", "n=20") == "http://test/list?n=20"


class TestQuery:
    """Tests for the Query descriptor."""

    def test_defaults(self) -> None:
        """Should require auth and have no params by default."""
        query = Query(address="http://test/list")
        assert query.requires_auth is True
        assert query.params_string == ""

    def test_params_string_encoded(self) -> None:
        """Should URL-encode params in order, keeping repeated names."""
        query = Query(
            address="http://test/edit",
            params=(("i", "1"), ("i", "2"), ("a", "user/-/state/read")),
        )
        assert query.params_string == "i=1&i=2&a=user%2F-%2Fstate%2Fread"

    def test_immutable(self) -> None:
        """Should not allow mutation."""
        query = Query(address="http://test/list")
        with pytest.raises(AttributeError):
            query.address = "http://other/"  # type: ignore[misc]

    def test_build_https(self) -> None:
        """Should build an https address from host and path."""
        query = Query.build("reader.example.com", "/reader/api/0/tag/list", {"output": "json"})
        assert query.address == "https://reader.example.com/reader/api/0/tag/list"
        assert query.params_string == "output=json"

    def test_build_http(self) -> None:
        """Should build an http address when HTTPS is disabled."""
        query = Query.build("reader.example.com", "reader/api/0/token", https=False, requires_auth=False)
        assert query.address == "http://reader.example.com/reader/api/0/token"
        assert query.requires_auth is False

    def test_build_from_pairs(self) -> None:
        """Should accept pairs and stringify values."""
        query = Query.build("reader.example.com", "/stream", [("n", 20), ("r", "o")])
        assert query.params == (("n", "20"), ("r", "o"))


class TestQueryExecutorGet:
    """Tests for GET queries."""

    def test_bytes_without_params(self, httpx_mock, client: HTTPClient) -> None:  # type: ignore[no-untyped-def]
        """Should request the bare address when there are no params."""
        httpx_mock.add_response(url="http://test/list", content=b"data")
        queries = QueryExecutor(client)

        result = queries.query_bytes_via_get(Query(address="http://test/list", requires_auth=False))

        assert result == b"data"
        assert str(httpx_mock.get_request().url) == "http://test/list"

    def test_bytes_with_params(self, httpx_mock, client: HTTPClient) -> None:  # type: ignore[no-untyped-def]
        """Should append params with one separator."""
        httpx_mock.add_response(url="http://test/list?n=20&output=json", content=b"data")
        queries = QueryExecutor(client)
        query = Query(
            address="http://test/list",
            params=(("n", "20"), ("output", "json")),
            requires_auth=False,
        )

        queries.query_bytes_via_get(query)

        assert str(httpx_mock.get_request().url) == "http://test/list?n=20&output=json"

    def test_auth_token_attached(self, httpx_mock, client: HTTPClient) -> None:  # type: ignore[no-untyped-def]
        """Should fetch a token and attach it for authenticated queries."""
        httpx_mock.add_response(
            url="http://test/private",
            match_headers={"Authorization": "Bearer secret"},
        )
        queries = QueryExecutor(client, StaticTokenProvider("secret"))

        queries.query_bytes_via_get(Query(address="http://test/private"))

    def test_auth_skipped_when_not_required(self, httpx_mock, client: HTTPClient) -> None:  # type: ignore[no-untyped-def]
        """Should not consult the auth provider for public queries."""
        httpx_mock.add_response(url="http://test/public")
        provider = MagicMock()
        queries = QueryExecutor(client, provider)

        queries.query_bytes_via_get(Query(address="http://test/public", requires_auth=False))

        provider.blocking_fetch_token.assert_not_called()

    def test_text(self, httpx_mock, client: HTTPClient) -> None:  # type: ignore[no-untyped-def]
        """Should decode the body as UTF-8."""
        httpx_mock.add_response(url="http://test/feed", content="Café ✓ 読む".encode())
        queries = QueryExecutor(client)

        text = queries.query_text_via_get(Query(address="http://test/feed", requires_auth=False))

        assert text == "Café ✓ 読む"

    def test_stream(self, httpx_mock, client: HTTPClient) -> None:  # type: ignore[no-untyped-def]
        """Should hand an open stream to the caller."""
        httpx_mock.add_response(url="http://test/feed", content=b"items")
        queries = QueryExecutor(client)

        stream = queries.query_stream_via_get(Query(address="http://test/feed", requires_auth=False))
        try:
            assert stream.read() == b"items"
        finally:
            stream.close()


class TestQueryExecutorPost:
    """Tests for POST queries."""

    def test_bytes_via_post(self, httpx_mock, client: HTTPClient) -> None:  # type: ignore[no-untyped-def]
        """Should send the params as the form body."""
        httpx_mock.add_response(
            method="POST",
            url="http://test/edit-tag?i=42&a=read",
            match_content=b"i=42&a=read",
            content=b"OK",
        )
        queries = QueryExecutor(client, StaticTokenProvider("secret"))
        query = Query(address="http://test/edit-tag", params=(("i", "42"), ("a", "read")))

        assert queries.query_bytes_via_post(query) == b"OK"

    def test_post_without_params(self, httpx_mock, client: HTTPClient) -> None:  # type: ignore[no-untyped-def]
        """Should post an empty body to the bare address."""
        httpx_mock.add_response(method="POST", url="http://test/mark-all", content=b"OK")
        queries = QueryExecutor(client)

        queries.query_bytes_via_post(Query(address="http://test/mark-all", requires_auth=False))

        request = httpx_mock.get_request()
        assert str(request.url) == "http://test/mark-all"
        assert request.content == b""

    def test_text_via_post(self, httpx_mock, client: HTTPClient) -> None:  # type: ignore[no-untyped-def]
        """Should decode POST responses."""
        httpx_mock.add_response(method="POST", url="http://test/contents?i=1", text="<item/>")
        queries = QueryExecutor(client)
        query = Query(address="http://test/contents", params=(("i", "1"),), requires_auth=False)

        assert queries.query_text_via_post(query) == "<item/>"

    def test_stream_via_post(self, httpx_mock, client: HTTPClient) -> None:  # type: ignore[no-untyped-def]
        """Should stream POST responses."""
        httpx_mock.add_response(method="POST", url="http://test/contents", content=b"<item/>")
        queries = QueryExecutor(client)

        stream = queries.query_stream_via_post(Query(address="http://test/contents", requires_auth=False))
        try:
            assert stream.read() == b"<item/>"
        finally:
            stream.close()


class TestQueryExecutorErrors:
    """Tests for uniform error wrapping."""

    def test_auth_failure(self, httpx_mock, client: HTTPClient) -> None:  # type: ignore[no-untyped-def]
        """Should wrap auth provider failures without sending a request."""
        provider = MagicMock()
        provider.blocking_fetch_token.side_effect = AuthError("login required")
        queries = QueryExecutor(client, provider)

        with pytest.raises(QueryError) as exc:
            queries.query_bytes_via_get(Query(address="http://test/private"))

        assert isinstance(exc.value.__cause__, AuthError)
        assert httpx_mock.get_requests() == []

    def test_missing_auth_provider(self, httpx_mock, client: HTTPClient) -> None:  # type: ignore[no-untyped-def]
        """Should fail authenticated queries when no provider is set."""
        queries = QueryExecutor(client)

        with pytest.raises(QueryError) as exc:
            queries.query_text_via_get(Query(address="http://test/private"))

        assert isinstance(exc.value.__cause__, AuthError)

    def test_http_error(self, httpx_mock, client: HTTPClient) -> None:  # type: ignore[no-untyped-def]
        """Should wrap error status responses."""
        httpx_mock.add_response(url="http://test/list", status_code=500, text="boom")
        queries = QueryExecutor(client)

        with pytest.raises(QueryError) as exc:
            queries.query_bytes_via_get(Query(address="http://test/list", requires_auth=False))

        assert isinstance(exc.value.__cause__, APIError)

    def test_network_error(self, httpx_mock, client: HTTPClient) -> None:  # type: ignore[no-untyped-def]
        """Should wrap transport failures."""
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))
        queries = QueryExecutor(client)

        with pytest.raises(QueryError) as exc:
            queries.query_text_via_post(Query(address="http://test/list", requires_auth=False))

        assert isinstance(exc.value.__cause__, NetworkError)

    def test_descriptor_failure(self, client: HTTPClient) -> None:
        """Should wrap errors raised while reading the descriptor."""
        queries = QueryExecutor(client)

        with pytest.raises(QueryError) as exc:
            queries.query_bytes_via_get(BrokenQuery())

        assert isinstance(exc.value.__cause__, ValueError)

    def test_decode_failure(self, httpx_mock, client: HTTPClient) -> None:  # type: ignore[no-untyped-def]
        """Should wrap invalid UTF-8 in QueryError."""
        httpx_mock.add_response(url="http://test/feed", content=b"\xff\xfe\xfa")
        queries = QueryExecutor(client)

        with pytest.raises(QueryError):
            queries.query_text_via_get(Query(address="http://test/feed", requires_auth=False))

    def test_query_error_is_sync_error(self) -> None:
        """Should let protocol bodies propagate QueryError as SyncError."""
        assert issubclass(QueryError, SyncError)

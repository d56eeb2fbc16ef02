"""HTTP transport for the feed-reading service.

This module provides:
- HTTPClient: Long-lived httpx client shared by every syncer
- ResponseStream: Readable byte stream over a streamed response
- APIError hierarchy for status and network failures
"""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from collections.abc import Iterator

    from feedsync.core.config import ServerConfig

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class APIError(Exception):
    """Base exception for API errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(APIError):
    """Authentication failed."""


class NotFoundError(APIError):
    """Resource not found."""


class NetworkError(APIError):
    """Connection or protocol failure before a response was received."""


class ResponseStream(io.RawIOBase):
    """Raw byte stream over a streamed httpx response.

    Closing the stream closes the underlying response and releases the
    connection back to the pool.
    """

    def __init__(self, response: httpx.Response) -> None:
        super().__init__()
        self._response = response
        self._chunks: Iterator[bytes] = response.iter_bytes()
        self._pending = b""

    @property
    def status_code(self) -> int:
        """HTTP status of the response."""
        return self._response.status_code

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: bytearray | memoryview) -> int:  # type: ignore[override]
        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
            except httpx.RequestError as e:
                raise NetworkError(f"Reading response body failed: {e}") from e
        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size

    def close(self) -> None:
        if self.closed:
            return
        try:
            self._response.close()
        finally:
            super().close()


class HTTPClient:
    """HTTP client shared by all syncers of a process.

    The client owns one httpx connection pool. Authentication is attached
    with set_auth() and applies to every subsequent request.
    """

    def __init__(self, config: ServerConfig) -> None:
        """Initialize the HTTP client.

        Args:
            config: Server configuration (URL, timeout, SSL verification).
        """
        self._config = config
        self._client = httpx.Client(
            base_url=config.server_url,
            timeout=config.timeout,
            verify=config.verify_ssl,
            follow_redirects=True,
            headers={"User-Agent": config.user_agent},
        )

    @property
    def config(self) -> ServerConfig:
        """Server configuration this client was built from."""
        return self._config

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> HTTPClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    def set_auth(self, token: str) -> None:
        """Attach an auth token to all following requests.

        Args:
            token: Token issued by the auth provider.
        """
        self._client.headers["Authorization"] = self._config.render_auth_header(token)

    def clear_auth(self) -> None:
        """Remove the Authorization header."""
        self._client.headers.pop("Authorization", None)

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Handle API response and raise appropriate exceptions."""
        if response.status_code == 401:
            raise AuthenticationError("Invalid or expired token", 401)
        if response.status_code == 404:
            raise NotFoundError("Resource not found", 404)
        if response.status_code >= 400:
            detail = response.text.strip() or response.reason_phrase or "Unknown error"
            raise APIError(detail, response.status_code)
        return response

    def _send(self, request: httpx.Request) -> httpx.Response:
        try:
            response = self._client.send(request)
        except httpx.RequestError as e:
            raise NetworkError(f"{request.method} {request.url} failed: {e}") from e
        return self._handle_response(response)

    def _send_stream(self, request: httpx.Request) -> ResponseStream:
        try:
            response = self._client.send(request, stream=True)
        except httpx.RequestError as e:
            raise NetworkError(f"{request.method} {request.url} failed: {e}") from e

        if response.status_code >= 400:
            try:
                response.read()
            except httpx.RequestError as e:
                raise NetworkError(f"{request.method} {request.url} failed: {e}") from e
            finally:
                response.close()
            self._handle_response(response)
        return ResponseStream(response)

    def _build_post(self, url: str, body: str) -> httpx.Request:
        return self._client.build_request(
            "POST",
            url,
            content=body.encode("utf-8"),
            headers={"Content-Type": FORM_CONTENT_TYPE},
        )

    # === GET ===

    def get_bytes(self, url: str) -> bytes:
        """Perform a GET request and return the whole body.

        Args:
            url: Absolute URL or path relative to the server URL.

        Returns:
            Response body.

        Raises:
            APIError: On error status or network failure.
        """
        logger.debug("GET %s", url)
        return self._send(self._client.build_request("GET", url)).content

    def get_stream(self, url: str) -> ResponseStream:
        """Perform a GET request and return the body as a stream.

        The caller owns the returned stream and must close it.
        """
        logger.debug("GET (stream) %s", url)
        return self._send_stream(self._client.build_request("GET", url))

    # === POST ===

    def post_bytes(self, url: str, body: str) -> bytes:
        """Perform a form-encoded POST request and return the whole body.

        Args:
            url: Absolute URL or path relative to the server URL.
            body: URL-encoded form body.

        Returns:
            Response body.
        """
        logger.debug("POST %s", url)
        return self._send(self._build_post(url, body)).content

    def post_stream(self, url: str, body: str) -> ResponseStream:
        """Perform a form-encoded POST request and return the body as a stream.

        The caller owns the returned stream and must close it.
        """
        logger.debug("POST (stream) %s", url)
        return self._send_stream(self._build_post(url, body))

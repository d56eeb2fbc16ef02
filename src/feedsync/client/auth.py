"""Auth token providers for feedsync.

This module provides:
- AuthProvider: Protocol consumed by the query layer
- TokenProvider: Caches a fetched token for a bounded freshness window
- StaticTokenProvider: Serves a pre-issued token
- OS keyring helpers to persist tokens between runs
"""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING, Protocol

import keyring
from keyring.errors import PasswordDeleteError

from feedsync.core.config import TOKEN_EXPIRE_TIME

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

KEYRING_SERVICE = "feedsync"
DEFAULT_WAIT_TIMEOUT = 60.0


class AuthError(Exception):
    """Raised when no auth token can be obtained."""


class AuthProvider(Protocol):
    """Source of auth tokens.

    Implementations block the calling thread until a token is available
    or fail with AuthError.
    """

    def blocking_fetch_token(self) -> str:
        """Return a usable auth token, blocking if necessary."""
        ...


class StaticTokenProvider:
    """Auth provider for a token issued out of band."""

    def __init__(self, token: str) -> None:
        self._token = token

    def blocking_fetch_token(self) -> str:
        if not self._token:
            raise AuthError("No auth token configured")
        return self._token


class TokenProvider:
    """Auth provider that fetches tokens on demand and caches them.

    A cached token is reused while it is younger than expire_time. Callers
    share a single lock, so only one fetch is in flight at a time and other
    callers wait for its result (up to wait_timeout seconds).

    Usage:
        provider = TokenProvider(login_client.fetch_token)
        token = provider.blocking_fetch_token()
    """

    def __init__(
        self,
        fetch_token: Callable[[], str],
        expire_time: float = TOKEN_EXPIRE_TIME,
        wait_timeout: float | None = DEFAULT_WAIT_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the provider.

        Args:
            fetch_token: Function returning a fresh token (may block).
            expire_time: Seconds a fetched token stays fresh.
            wait_timeout: Max seconds to wait for another caller's fetch
                (None waits forever).
            clock: Monotonic time source.
        """
        self._fetch_token = fetch_token
        self._expire_time = expire_time
        self._wait_timeout = wait_timeout
        self._clock = clock
        self._lock = threading.Lock()
        self._token: str | None = None
        self._fetched_at = 0.0

    @property
    def expire_time(self) -> float:
        """Seconds a fetched token stays fresh."""
        return self._expire_time

    def _is_fresh(self, now: float) -> bool:
        return self._token is not None and now - self._fetched_at < self._expire_time

    def blocking_fetch_token(self) -> str:
        """Return a fresh token, fetching a new one if the cache expired.

        Raises:
            AuthError: If the wait times out or the fetch fails.
        """
        timeout = -1 if self._wait_timeout is None else self._wait_timeout
        if not self._lock.acquire(timeout=timeout):
            raise AuthError(f"Timed out after {self._wait_timeout}s waiting for auth token")
        try:
            now = self._clock()
            if self._is_fresh(now):
                return self._token  # type: ignore[return-value]

            logger.debug("Auth token missing or expired, fetching a new one")
            try:
                token = self._fetch_token()
            except AuthError:
                raise
            except Exception as e:
                raise AuthError(f"Failed to fetch auth token: {e}") from e

            if not token:
                raise AuthError("Auth token fetch returned an empty token")

            self._token = token
            self._fetched_at = now
            return token
        finally:
            self._lock.release()

    def invalidate(self) -> None:
        """Drop the cached token so the next call fetches a new one."""
        with self._lock:
            self._token = None
            self._fetched_at = 0.0


# === OS keyring storage ===


def store_keyring_token(account: str, token: str) -> None:
    """Save a token in the OS keyring.

    Args:
        account: Account name (usually the server URL).
        token: Token to store.
    """
    keyring.set_password(KEYRING_SERVICE, account, token)


def delete_keyring_token(account: str) -> None:
    """Remove a stored token, ignoring missing entries."""
    try:
        keyring.delete_password(KEYRING_SERVICE, account)
    except PasswordDeleteError:
        logger.debug("No keyring token stored for %s", account)


def keyring_token_fetcher(account: str) -> Callable[[], str]:
    """Build a fetch function reading the token stored for an account.

    Args:
        account: Account name used with store_keyring_token().

    Returns:
        Function suitable for TokenProvider(fetch_token=...).
    """

    def fetch() -> str:
        token = keyring.get_password(KEYRING_SERVICE, account)
        if not token:
            raise AuthError(f"No token stored for {account}. Run 'feedsync login' first.")
        return token

    return fetch

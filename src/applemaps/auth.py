"""Access token lifecycle for Apple Maps Server API authentication.

The long-lived auth token from the developer portal is only ever sent to
``/v1/token``, which answers with a short-lived access token. Access tokens
live in a token store so integrators can share them across processes (for
example in Redis) by supplying their own store.

Refreshing is lazy and single-flight: the request that notices the cached
token is close to expiry refreshes it while every concurrent caller keeps
using the cached token instead of queueing behind the refresh.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Protocol

logger = logging.getLogger(__name__)

# A cached token with less validity left than this is refreshed.
FRESHNESS_THRESHOLD_SECONDS = 60


@dataclass(frozen=True)
class AccessToken:
    """A bearer access token and its absolute expiry in unix seconds."""

    value: str = field(default="", repr=False)
    expires_at: int = 0

    def remaining(self, now: float | None = None) -> float:
        return self.expires_at - (time.time() if now is None else now)

    def is_fresh(self, now: float | None = None) -> bool:
        return bool(self.value) and self.remaining(now) > FRESHNESS_THRESHOLD_SECONDS


# ---------------------------------------------------------------------------
# Token stores
# ---------------------------------------------------------------------------


class TokenStore(Protocol):
    """Where the synchronous client keeps its access token.

    Implementations must be safe to call from several threads at once and
    must never let a reader observe a half-written token.
    """

    def get_access_token(self) -> AccessToken: ...

    def set_access_token(self, token: AccessToken) -> None: ...


class AsyncTokenStore(Protocol):
    """Where the async client keeps its access token."""

    async def get_access_token(self) -> AccessToken: ...

    async def set_access_token(self, token: AccessToken) -> None: ...


class MemoryTokenStore:
    """In-process token store guarded by a lock. Starts empty."""

    def __init__(self) -> None:
        self._token = AccessToken()
        self._lock = threading.Lock()

    def get_access_token(self) -> AccessToken:
        with self._lock:
            return self._token

    def set_access_token(self, token: AccessToken) -> None:
        with self._lock:
            self._token = token


class AsyncMemoryTokenStore:
    """In-process token store for a single event loop. Starts empty.

    The slot is replaced in a single assignment between awaits, so no lock
    is needed.
    """

    def __init__(self) -> None:
        self._token = AccessToken()

    async def get_access_token(self) -> AccessToken:
        return self._token

    async def set_access_token(self, token: AccessToken) -> None:
        self._token = token


# ---------------------------------------------------------------------------
# Auto refresh
# ---------------------------------------------------------------------------


class TokenSource(Protocol):
    """What the refresh coordinator needs from a synchronous client."""

    def get_access_token(self) -> AccessToken: ...

    def set_access_token(self, token: AccessToken) -> None: ...

    def get_new_access_token(self) -> AccessToken: ...


class AsyncTokenSource(Protocol):
    """What the refresh coordinator needs from an async client."""

    async def get_access_token(self) -> AccessToken: ...

    async def set_access_token(self, token: AccessToken) -> None: ...

    async def get_new_access_token(self) -> AccessToken: ...


class AutoRefresh:
    """Single-flight token refresh for the synchronous client.

    Calling the instance returns a token to use for the next request. The
    refresh lock is only ever tried, never waited on: if another thread is
    already refreshing, the cached token is returned as is, even when it is
    about to expire.

    One instance must not be shared between clients with different
    credentials; each client builds its own by default.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def __call__(self, client: TokenSource) -> AccessToken:
        token = client.get_access_token()
        if not self._lock.acquire(blocking=False):
            logger.debug("token refresh already in flight, using cached token")
            return token
        try:
            if token.is_fresh():
                return token
            new_token = client.get_new_access_token()
            client.set_access_token(new_token)
            logger.debug("access token refreshed, expires_at=%d", new_token.expires_at)
            return new_token
        finally:
            self._lock.release()


class AsyncAutoRefresh:
    """Single-flight token refresh for the async client.

    Same policy as :class:`AutoRefresh`. ``asyncio.Lock.acquire`` on a free
    lock returns without suspending, so checking ``locked()`` first gives
    try-lock semantics. Cancellation while refreshing releases the lock.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()

    async def __call__(self, client: AsyncTokenSource) -> AccessToken:
        token = await client.get_access_token()
        if self._lock.locked():
            logger.debug("token refresh already in flight, using cached token")
            return token
        async with self._lock:
            if token.is_fresh():
                return token
            new_token = await client.get_new_access_token()
            await client.set_access_token(new_token)
            logger.debug("access token refreshed, expires_at=%d", new_token.expires_at)
            return new_token

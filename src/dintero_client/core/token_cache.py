"""
Token cache for OAuth access tokens.

The cache is a single lock-protected cell owned by exactly one OAuth auth
provider. Reads take a shared lock; refreshes take the exclusive lock and
re-validate the cached value before fetching (double-checked locking), so
concurrent callers on an empty or expired cache trigger a single fetch.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass(frozen=True)
class CachedToken:
    """
    Access token with its expiry.

    Attributes:
        access_token: Raw token value
        expires_at: Expiry instant on the owning cache's clock
    """
    access_token: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        """Token is usable only while expiry is strictly in the future."""
        return self.expires_at > now

    def __repr__(self) -> str:
        return f"CachedToken(access_token='***', expires_at={self.expires_at})"


class AsyncRWLock:
    """
    Read/write lock for asyncio.

    Any number of readers may hold the lock together; a writer holds it
    alone. Waiting writers block new readers so a refresh is not starved
    by a steady stream of cache hits.

    Example:
        >>> lock = AsyncRWLock()
        >>> async with lock.read():
        ...     value = cell
        >>> async with lock.write():
        ...     cell = new_value
    """

    def __init__(self):
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        """Acquire shared access."""
        async with self._cond:
            await self._cond.wait_for(
                lambda: not self._writer and self._waiting_writers == 0
            )
            self._readers += 1
        try:
            yield
        finally:
            async with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        """Acquire exclusive access."""
        async with self._cond:
            self._waiting_writers += 1
            try:
                await self._cond.wait_for(
                    lambda: not self._writer and self._readers == 0
                )
            finally:
                self._waiting_writers -= 1
                # Readers blocked on us must re-check if we gave up (cancelled)
                self._cond.notify_all()
            self._writer = True
        try:
            yield
        finally:
            async with self._cond:
                self._writer = False
                self._cond.notify_all()

    @property
    def readers(self) -> int:
        """Number of readers currently holding the lock."""
        return self._readers

    @property
    def locked_for_write(self) -> bool:
        """True while a writer holds the lock."""
        return self._writer


class TokenCache:
    """
    Lock-protected cell holding at most one CachedToken.

    Args:
        clock: Monotonic clock used for expiry checks (injectable for tests)

    Example:
        >>> cache = TokenCache()
        >>> token = await cache.get_or_refresh(fetch_token)
    """

    def __init__(self, clock: Clock = time.monotonic):
        self._clock = clock
        self._token: Optional[CachedToken] = None
        self._lock = AsyncRWLock()

    def now(self) -> float:
        """Current instant on the cache clock."""
        return self._clock()

    async def get(self) -> Optional[CachedToken]:
        """Return the cached token if it is still valid."""
        async with self._lock.read():
            token = self._token
            if token is not None and token.is_valid(self._clock()):
                return token
        return None

    async def get_or_refresh(
        self,
        fetch: Callable[[], Awaitable[CachedToken]]
    ) -> CachedToken:
        """
        Return a valid token, fetching a new one when needed.

        Fast path is a shared read. On a miss the exclusive lock is taken
        and the cell is re-checked, since another task may have refreshed
        it while this one waited. The fetched token is stored before the
        exclusive lock is released.

        Args:
            fetch: Coroutine function performing the token exchange

        Returns:
            A token whose expiry is in the future

        Raises:
            Whatever ``fetch`` raises; the cache is left unchanged.
        """
        token = await self.get()
        if token is not None:
            return token

        async with self._lock.write():
            token = self._token
            if token is not None and token.is_valid(self._clock()):
                logger.debug("Token refreshed by a concurrent caller, reusing it")
                return token

            logger.debug("Token cache empty or expired, fetching a new token")
            token = await fetch()
            self._token = token
            return token

    async def invalidate(self) -> None:
        """Drop the cached token."""
        async with self._lock.write():
            self._token = None

    def peek(self) -> Optional[CachedToken]:
        """Cached token regardless of expiry (no locking, diagnostics only)."""
        return self._token

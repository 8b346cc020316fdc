"""Process-lifetime login token cache for feeds that require a session."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

log = getLogger(__name__)


class SessionCache:
    """Hold one reusable session token and refresh it lazily.

    The token never expires on its own; it is replaced only after ``invalidate``
    (typically following an authentication rejection from the feed). Concurrent
    first acquisitions are coalesced into a single ``login`` call.
    """

    def __init__(self, login: Callable[[], Awaitable[str]], *, name: str = "session") -> None:
        self._login = login
        self._name = name
        self._token: str | None = None
        self._lock = asyncio.Lock()

    @property
    def token(self) -> str | None:
        return self._token

    async def acquire(self) -> str:
        token = self._token
        if token is not None:
            return token
        async with self._lock:
            # another caller may have logged in while we waited for the lock
            if self._token is None:
                log.info("Logging in to %s", self._name)
                self._token = await self._login()
            return self._token

    def invalidate(self, token: str | None = None) -> None:
        """Drop the cached token.

        Passing the token that was rejected avoids discarding a fresher token
        another caller has already obtained.
        """
        if token is not None and token != self._token:
            return
        if self._token is not None:
            log.info("Invalidating cached %s token", self._name)
        self._token = None

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from globesync.adapters.spacetrack import SessionCache


def _counting_login(tokens: list[str]) -> tuple[Callable[[], Awaitable[str]], list[str]]:
    calls: list[str] = []

    async def login() -> str:
        await asyncio.sleep(0.01)
        token = tokens[len(calls)]
        calls.append(token)
        return token

    return login, calls


def test_concurrent_first_acquisitions_share_one_login() -> None:
    login, calls = _counting_login(["cookie-1"])
    cache = SessionCache(login, name="test")

    async def scenario() -> list[str]:
        return await asyncio.gather(*(cache.acquire() for _ in range(10)))

    tokens = asyncio.run(scenario())

    assert tokens == ["cookie-1"] * 10
    assert calls == ["cookie-1"]
    assert cache.token == "cookie-1"


def test_token_is_reused_until_invalidated() -> None:
    login, calls = _counting_login(["cookie-1", "cookie-2"])
    cache = SessionCache(login)

    async def scenario() -> tuple[str, str, str]:
        first = await cache.acquire()
        second = await cache.acquire()
        cache.invalidate(first)
        third = await cache.acquire()
        return first, second, third

    assert asyncio.run(scenario()) == ("cookie-1", "cookie-1", "cookie-2")
    assert len(calls) == 2


def test_invalidating_a_stale_token_keeps_the_fresh_one() -> None:
    login, calls = _counting_login(["cookie-1", "cookie-2"])
    cache = SessionCache(login)

    async def scenario() -> str:
        stale = await cache.acquire()
        cache.invalidate(stale)
        await cache.acquire()
        cache.invalidate(stale)
        return await cache.acquire()

    assert asyncio.run(scenario()) == "cookie-2"
    assert len(calls) == 2


def test_failed_login_leaves_cache_empty() -> None:
    attempts = 0

    async def login() -> str:
        nonlocal attempts
        attempts += 1
        if attempts == 1:
            raise RuntimeError("login refused")
        return "cookie-after-retry"

    cache = SessionCache(login)

    async def scenario() -> str:
        try:
            await cache.acquire()
        except RuntimeError:
            pass
        return await cache.acquire()

    assert asyncio.run(scenario()) == "cookie-after-retry"
    assert attempts == 2

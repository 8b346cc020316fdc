"""Shared async HTTP client for the feed adapters.

Every feed request goes through ``ResilientClient``: transient failures are
retried, calls are throttled to the provider's published rate limit, and feeds
that tolerate stale answers can be served from a short-lived response cache.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from globesync.config.storage import get_storage_config

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from globesync.config.http_resilience import (
        CacheConfig,
        RateLimit,
        ResilienceConfig,
        RetryPolicy,
    )

log = getLogger(__name__)

HTTP_CACHE_FILENAME = "http_cache.db"


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=tuple(policy.allowed_methods),
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
        backoff_jitter=policy.backoff_jitter,
    )


def build_limiter(ratelimit: RateLimit | None) -> AsyncLimiter | None:
    if ratelimit is None:
        return None
    return AsyncLimiter(ratelimit.max_calls, ratelimit.per_seconds)


class ResilientClient:
    """One feed's HTTP session: retry transport, rate limiter and optional cache.

    ``transport`` replaces the network transport underneath the retry layer; the
    adapters never pass it, tests hand in an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._limiter = build_limiter(config.ratelimit)
        self._client = _build_http_client(
            config,
            RetryTransport(transport=transport, retry=build_retry(config.retry)),
        )

    @property
    def name(self) -> str:
        return self.config.name

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(
        self,
        path: str,
        *,
        params: httpx.QueryParams | Mapping[str, str | int | float] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        request = self._client.build_request("GET", path, params=params, headers=headers)
        return await self._send(request)

    async def post(
        self,
        path: str,
        *,
        data: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        request = self._client.build_request("POST", path, data=data, headers=headers)
        return await self._send(request)

    async def _send(self, request: httpx.Request) -> httpx.Response:
        if self._limiter is None:
            response = await self._client.send(request)
        else:
            async with self._limiter:
                response = await self._client.send(request)
        log.debug(
            "%s %s %s -> %s", self.name, request.method, request.url.path, response.status_code
        )
        return response


def _build_http_client(config: ResilienceConfig, transport: RetryTransport) -> httpx.AsyncClient:
    options: dict[str, object] = {"timeout": config.timeout_seconds, "transport": transport}
    if config.base_url is not None:
        options["base_url"] = config.base_url
    if config.default_headers:
        options["headers"] = dict(config.default_headers)

    storage = _build_cache_storage(config.cache)
    if storage is None:
        return httpx.AsyncClient(**options)  # pyright: ignore[reportArgumentType]
    log.debug("%s: caching responses", config.name)
    return AsyncCacheClient(**options, storage=storage)  # pyright: ignore[reportArgumentType]


def _build_cache_storage(config: CacheConfig | None) -> AsyncSqliteStorage | None:
    if config is None or not config.enabled:
        return None

    match config.backend:
        case "memory":
            database_path = ":memory:"
        case "sqlite":
            cache_file = config.sqlite_path or get_storage_config().file(HTTP_CACHE_FILENAME)
            database_path = str(cache_file)
        case _:
            raise ValueError(f"Unsupported cache backend: {config.backend}")

    return AsyncSqliteStorage(
        database_path=database_path,
        default_ttl=config.default_ttl_seconds,
        refresh_ttl_on_access=config.refresh_ttl_on_access,
    )

"""HTTP client for the Space-Track general perturbations feed."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final
from urllib.parse import quote

import httpx

from globesync.adapters.http_resilience import ResilientClient
from globesync.adapters.parsing import parse_records
from globesync.domain.errors import AuthenticationFailed, FeedUnavailable

from .session import SessionCache
from .translator import FEED_NAME, parse_orbital_record

if TYPE_CHECKING:
    from collections.abc import Callable

    from globesync.config.http_resilience import ResilienceConfig
    from globesync.config.spacetrack import SpaceTrackConfig
    from globesync.domain.model import OrbitalElementRecord
    from globesync.domain.ports.fetching import FetchResult
    from globesync.domain.queries import OrbitalQuery

log = getLogger(__name__)

QUERY_ROOT: Final[str] = "/basicspacedata/query/class/gp/decay_date/null-val"
AUTH_REJECTION_STATUSES: Final[frozenset[int]] = frozenset({401, 403})


def render_query_path(query: OrbitalQuery) -> str:
    """Render the REST path selecting objects for ``query``."""

    segments = [QUERY_ROOT, f"epoch/>now-{query.max_epoch_age_days}"]
    if query.catalog_ids:
        segments.append("NORAD_CAT_ID/" + ",".join(str(value) for value in query.catalog_ids))
    if query.name_contains:
        segments.append("OBJECT_NAME/~~" + quote(query.name_contains, safe=""))
    if query.order_by_catalog_id:
        segments.append("orderby/norad_cat_id")
    segments.append("format/json")
    return "/".join(segments)


def _session_cookie(response: httpx.Response) -> str | None:
    if not response.cookies:
        return None
    return "; ".join(f"{name}={value}" for name, value in response.cookies.items())


class SpaceTrackAuthenticator:
    """Perform the Space-Track form login and return the session cookie."""

    def __init__(
        self,
        config: SpaceTrackConfig,
        *,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory or ResilientClient

    async def __call__(self) -> str:
        async with self._client_factory(self._config.resilience) as client:
            try:
                response = await client.post(
                    self._config.login_path,
                    data={"identity": self._config.username, "password": self._config.password},
                )
            except httpx.HTTPError as exc:
                raise FeedUnavailable(FEED_NAME, f"login request failed: {exc}") from exc

        body = response.text
        if response.is_error:
            log.error("Space-Track login failed:\n%s", body)
            raise AuthenticationFailed(FEED_NAME, status_code=response.status_code, body=body)
        # a rejected login still answers 200 with a JSON failure marker
        cookie = _session_cookie(response)
        if cookie is None or '"Login":"Failed"' in body.replace(" ", ""):
            log.error("Space-Track login rejected:\n%s", body)
            raise AuthenticationFailed(FEED_NAME, status_code=response.status_code, body=body)
        return cookie


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class SpaceTrackClient:
    """Fetch element sets, authenticating through a shared ``SessionCache``."""

    config: SpaceTrackConfig
    session: SessionCache | None = None
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def __post_init__(self) -> None:
        if self.session is None:
            authenticator = SpaceTrackAuthenticator(self.config, client_factory=self.client_factory)
            self.session = SessionCache(authenticator, name=FEED_NAME)

    async def fetch(self, query: OrbitalQuery) -> FetchResult[OrbitalElementRecord]:
        path = render_query_path(query)
        log.info("Fetching orbital elements: %s", path)
        async with self.client_factory(self.config.resilience) as client:
            payload = await self._get_authenticated(client, path)
        return parse_records(payload, parse_orbital_record)

    async def _get_authenticated(self, client: ResilientClient, path: str) -> list[object]:
        session = self._session_cache()
        token = await session.acquire()
        response = await _send(client, path, token)
        if response.status_code in AUTH_REJECTION_STATUSES:
            # one fresh login is allowed before giving up on this pass
            session.invalidate(token)
            log.warning("Space-Track rejected the session; logging in again")
            token = await session.acquire()
            response = await _send(client, path, token)
            if response.status_code in AUTH_REJECTION_STATUSES:
                session.invalidate(token)
                raise FeedUnavailable(
                    FEED_NAME,
                    "session rejected after a fresh login",
                    status_code=response.status_code,
                )
        return _decode_payload(response)

    def _session_cache(self) -> SessionCache:
        if self.session is None:
            raise RuntimeError("Space-Track session cache not configured")
        return self.session


def _decode_payload(response: httpx.Response) -> list[object]:
    if response.is_error:
        raise FeedUnavailable(
            FEED_NAME,
            f"HTTP {response.status_code}: {response.text[:200]}",
            status_code=response.status_code,
        )
    try:
        payload = response.json()
    except ValueError as exc:
        raise FeedUnavailable(FEED_NAME, "response is not valid JSON") from exc
    if not isinstance(payload, list):
        raise FeedUnavailable(FEED_NAME, "expected a JSON array of element sets")
    return payload  # pyright: ignore[reportUnknownVariableType]


async def _send(client: ResilientClient, path: str, token: str) -> httpx.Response:
    try:
        return await client.get(path, headers={"Cookie": token})
    except httpx.HTTPError as exc:
        raise FeedUnavailable(FEED_NAME, str(exc)) from exc

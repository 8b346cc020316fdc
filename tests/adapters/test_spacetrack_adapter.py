from __future__ import annotations

import asyncio
import json
from datetime import UTC, datetime

import httpx
import pytest

from globesync.adapters.spacetrack import (
    SessionCache,
    SpaceTrackClient,
    parse_orbital_record,
    render_query_path,
)
from globesync.config import SpaceTrackConfig, get_spacetrack_config
from globesync.config.errors import MissingConfigurationError
from globesync.domain.errors import AuthenticationFailed, FeedUnavailable, RecordParseSkipped
from globesync.domain.queries import OrbitalQuery
from tests.helpers.http import make_client_factory, resilience_for

LOGIN_PATH = "/ajaxauth/login"


def _gp_payload(catalog_id: int = 25544, **overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "NORAD_CAT_ID": str(catalog_id),
        "OBJECT_NAME": "ISS (ZARYA)",
        "OBJECT_TYPE": "PAYLOAD",
        "COUNTRY_CODE": "ISS",
        "LAUNCH_DATE": "1998-11-20",
        "DECAY_DATE": None,
        "EPOCH": "2024-01-01T12:00:00.000000",
        "TLE_LINE1": "1 25544U 98067A   24001.50000000  .00016717  00000-0  10270-3 0  9005",
        "TLE_LINE2": "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537",
        "INCLINATION": "51.6416",
        "ECCENTRICITY": "0.0006703",
        "PERIOD": "92.90",
        "APOAPSIS": "422.0",
        "PERIAPSIS": "413.0",
        "SEMIMAJOR_AXIS": "6795.0",
    }
    payload.update(overrides)
    return payload


def _config() -> SpaceTrackConfig:
    return SpaceTrackConfig(
        username="user@example.com",
        password="secret",
        resilience=resilience_for("spacetrack"),
    )


class FakeSpaceTrack:
    """Scripted Space-Track server: answers logins and serves queued query responses."""

    def __init__(self, *responses: httpx.Response, login_ok: bool = True) -> None:
        self.responses = list(responses)
        self.login_ok = login_ok
        self.logins = 0
        self.queries: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == LOGIN_PATH:
            self.logins += 1
            if not self.login_ok:
                return httpx.Response(401, text='{"Login":"Failed"}')
            return httpx.Response(
                200,
                text='""',
                headers={"Set-Cookie": f"chocolatechip=session{self.logins}; Path=/"},
            )
        self.queries.append(request)
        return self.responses.pop(0)


def _client(server: FakeSpaceTrack, session: SessionCache | None = None) -> SpaceTrackClient:
    return SpaceTrackClient(_config(), session=session, client_factory=make_client_factory(server))


def test_render_query_path_for_interest_set() -> None:
    path = render_query_path(OrbitalQuery(catalog_ids=(25544, 20580)))

    assert path == (
        "/basicspacedata/query/class/gp/decay_date/null-val/epoch/>now-30"
        "/NORAD_CAT_ID/25544,20580/orderby/norad_cat_id/format/json"
    )


def test_render_query_path_for_single_object_and_name_search() -> None:
    assert render_query_path(OrbitalQuery.by_catalog_id(25544)).endswith(
        "/epoch/>now-30/NORAD_CAT_ID/25544/format/json"
    )
    assert "/OBJECT_NAME/~~STARLINK/orderby/norad_cat_id/" in render_query_path(
        OrbitalQuery.constellation("starlink")
    )
    assert "/OBJECT_NAME/~~ISS%20%28ZARYA%29/" in render_query_path(
        OrbitalQuery.by_name("ISS (ZARYA)")
    )


def test_parse_orbital_record_normalizes_payload() -> None:
    record = parse_orbital_record(_gp_payload(OBJECT_TYPE="  ", DECAY_DATE=""))

    assert record.catalog_id == 25544
    assert record.object_type is None
    assert record.decay_date is None
    assert record.epoch == datetime(2024, 1, 1, 12, tzinfo=UTC)
    assert record.inclination == pytest.approx(51.6416)


def test_parse_orbital_record_rejects_missing_element_lines() -> None:
    with pytest.raises(RecordParseSkipped) as exc:
        parse_orbital_record(_gp_payload(TLE_LINE2="   "))

    assert exc.value.key == "25544"


def test_fetch_logs_in_once_and_reuses_cookie() -> None:
    server = FakeSpaceTrack(
        httpx.Response(200, json=[_gp_payload(25544)]),
        httpx.Response(200, json=[_gp_payload(20580)]),
    )
    client = _client(server)

    async def scenario() -> tuple[int, int]:
        first = await client.fetch(OrbitalQuery.by_catalog_id(25544))
        second = await client.fetch(OrbitalQuery.by_catalog_id(20580))
        return first.records[0].catalog_id, second.records[0].catalog_id

    assert asyncio.run(scenario()) == (25544, 20580)
    assert server.logins == 1
    assert all(
        request.headers["Cookie"] == "chocolatechip=session1" for request in server.queries
    )


def test_fetch_counts_unparseable_records() -> None:
    server = FakeSpaceTrack(
        httpx.Response(
            200,
            json=[_gp_payload(25544), {"NORAD_CAT_ID": "99999"}, _gp_payload(20580)],
        )
    )

    result = asyncio.run(_client(server).fetch(OrbitalQuery.interest_set()))

    assert [record.catalog_id for record in result.records] == [25544, 20580]
    assert result.skipped == 1


def test_auth_rejection_triggers_exactly_one_fresh_login() -> None:
    server = FakeSpaceTrack(
        httpx.Response(401, text="expired"),
        httpx.Response(200, json=[_gp_payload()]),
    )

    result = asyncio.run(_client(server).fetch(OrbitalQuery.interest_set()))

    assert len(result.records) == 1
    assert server.logins == 2
    assert server.queries[-1].headers["Cookie"] == "chocolatechip=session2"


def test_second_auth_rejection_surfaces_feed_unavailable() -> None:
    server = FakeSpaceTrack(
        httpx.Response(401, text="expired"),
        httpx.Response(403, text="still rejected"),
    )
    client = _client(server)

    with pytest.raises(FeedUnavailable) as exc:
        asyncio.run(client.fetch(OrbitalQuery.interest_set()))

    assert exc.value.status_code == 403
    assert server.logins == 2
    assert client.session is not None
    assert client.session.token is None


def test_login_failure_raises_authentication_failed_with_body() -> None:
    server = FakeSpaceTrack(login_ok=False)

    with pytest.raises(AuthenticationFailed) as exc:
        asyncio.run(_client(server).fetch(OrbitalQuery.interest_set()))

    assert exc.value.status_code == 401
    assert "Failed" in exc.value.body
    assert server.queries == []


def test_login_answered_without_cookie_is_rejected() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=json.dumps({"Login": "Failed"}))

    client = SpaceTrackClient(_config(), client_factory=make_client_factory(handler))

    with pytest.raises(AuthenticationFailed):
        asyncio.run(client.fetch(OrbitalQuery.interest_set()))


def test_non_list_payload_is_feed_unavailable() -> None:
    server = FakeSpaceTrack(httpx.Response(200, json={"error": "query too broad"}))

    with pytest.raises(FeedUnavailable, match="JSON array"):
        asyncio.run(_client(server).fetch(OrbitalQuery.all_active()))


def test_server_error_is_feed_unavailable() -> None:
    server = FakeSpaceTrack(httpx.Response(500, text="boom"))

    with pytest.raises(FeedUnavailable) as exc:
        asyncio.run(_client(server).fetch(OrbitalQuery.all_active()))

    assert exc.value.status_code == 500


def test_shared_session_cache_spans_clients() -> None:
    server = FakeSpaceTrack(
        httpx.Response(200, json=[_gp_payload(25544)]),
        httpx.Response(200, json=[_gp_payload(20580)]),
    )
    first = _client(server)
    second = _client(server, session=first.session)

    async def scenario() -> None:
        await first.fetch(OrbitalQuery.by_catalog_id(25544))
        await second.fetch(OrbitalQuery.by_catalog_id(20580))

    asyncio.run(scenario())

    assert server.logins == 1


def test_spacetrack_config_requires_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SPACETRACK_USERNAME", raising=False)
    monkeypatch.setenv("SPACETRACK_PASSWORD", "secret")

    with pytest.raises(MissingConfigurationError, match="SPACETRACK_USERNAME"):
        get_spacetrack_config()

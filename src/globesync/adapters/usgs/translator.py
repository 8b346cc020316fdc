"""Translate USGS GeoJSON features into seismic event records."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import cast

from pydantic import ValidationError

from globesync.domain.errors import RecordParseSkipped
from globesync.domain.model import SeismicEventRecord

from .schema import EventFeature

FEED_NAME = "usgs"


def epoch_millis_to_datetime(value: int) -> datetime:
    seconds, millis = divmod(value, 1000)
    return datetime.fromtimestamp(seconds, tz=UTC) + timedelta(milliseconds=millis)


def parse_seismic_record(payload: EventFeature | object) -> SeismicEventRecord:
    """Validate one feature, raising ``RecordParseSkipped`` when unusable."""

    if isinstance(payload, EventFeature):
        feature = payload
    else:
        try:
            feature = EventFeature.model_validate(payload)
        except ValidationError as exc:
            raise RecordParseSkipped(
                FEED_NAME,
                f"{exc.error_count()} validation errors",
                key=_feature_key(payload),
            ) from exc

    properties = feature.properties
    geometry = feature.geometry
    known_ids = properties.known_ids
    if feature.id not in known_ids:
        known_ids = (*known_ids, feature.id)

    return SeismicEventRecord(
        event_id=feature.id,
        known_ids=known_ids,
        feed_updated_at=epoch_millis_to_datetime(properties.updated),
        event_time=epoch_millis_to_datetime(properties.time),
        magnitude=properties.mag,
        place=properties.place,
        tz_offset_minutes=properties.tz,
        cdi=properties.cdi,
        mmi=properties.mmi,
        alert=properties.alert,
        status=properties.status,
        tsunami=properties.tsunami,
        significance=properties.sig,
        station_count=properties.nst,
        min_station_distance=properties.dmin,
        event_type=properties.type,
        longitude=geometry.longitude,
        latitude=geometry.latitude,
        depth_km=geometry.depth,
    )


def _feature_key(payload: object) -> object | None:
    if isinstance(payload, Mapping):
        return cast(Mapping[str, object], payload).get("id")
    return None

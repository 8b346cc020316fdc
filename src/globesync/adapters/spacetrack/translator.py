"""Translate Space-Track payloads into orbital element records."""

from __future__ import annotations

from collections.abc import Mapping
from typing import cast

from pydantic import ValidationError

from globesync.domain.errors import RecordParseSkipped
from globesync.domain.model import OrbitalElementRecord

from .schema import GeneralPerturbationsPayload

FEED_NAME = "spacetrack"


def parse_orbital_record(payload: GeneralPerturbationsPayload | object) -> OrbitalElementRecord:
    """Validate one raw ``gp`` object, raising ``RecordParseSkipped`` when unusable."""

    if isinstance(payload, GeneralPerturbationsPayload):
        model = payload
    else:
        try:
            model = GeneralPerturbationsPayload.model_validate(payload)
        except ValidationError as exc:
            raise RecordParseSkipped(
                FEED_NAME,
                f"{exc.error_count()} validation errors",
                key=_catalog_key(payload),
            ) from exc

    return OrbitalElementRecord(
        catalog_id=model.norad_cat_id,
        object_name=model.object_name,
        object_type=model.object_type,
        country_code=model.country_code,
        launch_date=model.launch_date,
        decay_date=model.decay_date,
        epoch=model.epoch,
        tle_line1=model.tle_line1,
        tle_line2=model.tle_line2,
        inclination=model.inclination,
        eccentricity=model.eccentricity,
        period=model.period,
        apoapsis=model.apoapsis,
        periapsis=model.periapsis,
        semimajor_axis=model.semimajor_axis,
    )


def _catalog_key(payload: object) -> object | None:
    if isinstance(payload, Mapping):
        return cast(Mapping[str, object], payload).get("NORAD_CAT_ID")
    return None

"""Pydantic models describing the Space-Track ``gp`` payloads."""

from __future__ import annotations

from datetime import UTC, date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class SpaceTrackBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class GeneralPerturbationsPayload(SpaceTrackBaseModel):
    """One flat object of the ``class/gp`` query; numeric values arrive as strings."""

    norad_cat_id: int = Field(alias="NORAD_CAT_ID")
    object_name: str = Field(alias="OBJECT_NAME")
    object_type: str | None = Field(default=None, alias="OBJECT_TYPE")
    country_code: str | None = Field(default=None, alias="COUNTRY_CODE")
    launch_date: date | None = Field(default=None, alias="LAUNCH_DATE")
    decay_date: date | None = Field(default=None, alias="DECAY_DATE")
    epoch: datetime = Field(alias="EPOCH")
    tle_line1: str = Field(alias="TLE_LINE1")
    tle_line2: str = Field(alias="TLE_LINE2")
    inclination: float = Field(alias="INCLINATION")
    eccentricity: float = Field(alias="ECCENTRICITY")
    period: float = Field(alias="PERIOD")
    apoapsis: float = Field(alias="APOAPSIS")
    periapsis: float = Field(alias="PERIAPSIS")
    semimajor_axis: float = Field(alias="SEMIMAJOR_AXIS")

    _normalize_optional = field_validator(
        "object_type",
        "country_code",
        "launch_date",
        "decay_date",
        mode="before",
    )(_blank_to_none)

    @field_validator("tle_line1", "tle_line2")
    @classmethod
    def _require_element_line(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("element set line must not be blank")
        return stripped

    @field_validator("epoch")
    @classmethod
    def _epoch_is_utc(cls, value: datetime) -> datetime:
        # the feed publishes naive UTC timestamps
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

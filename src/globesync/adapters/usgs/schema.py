"""Pydantic models describing the USGS GeoJSON event feed."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UsgsBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class EventProperties(UsgsBaseModel):
    mag: float | None = None
    place: str | None = None
    time: int
    updated: int
    tz: int | None = None
    cdi: float | None = None
    mmi: float | None = None
    alert: str | None = None
    status: str | None = None
    tsunami: int = 0
    sig: int = 0
    nst: int | None = None
    dmin: float | None = None
    type: str | None = None
    ids: str | None = None

    @property
    def known_ids(self) -> tuple[str, ...]:
        """Split the comma-delimited identifier history, keeping feed order."""
        if not self.ids:
            return ()
        return tuple(part.strip() for part in self.ids.split(",") if part.strip())


class PointGeometry(UsgsBaseModel):
    type: Literal["Point"] = "Point"
    coordinates: tuple[float, float] | tuple[float, float, float | None]

    @property
    def longitude(self) -> float:
        return self.coordinates[0]

    @property
    def latitude(self) -> float:
        return self.coordinates[1]

    @property
    def depth(self) -> float | None:
        if len(self.coordinates) < 3:  # noqa: PLR2004
            return None
        return self.coordinates[2]


class EventFeature(UsgsBaseModel):
    type: Literal["Feature"] = "Feature"
    id: str = Field(min_length=1)
    properties: EventProperties
    geometry: PointGeometry

    @field_validator("id")
    @classmethod
    def _strip_id(cls, value: str) -> str:
        return value.strip()


class FeatureCollection(UsgsBaseModel):
    """Envelope around the feature list; only ``features`` is consumed."""

    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: list[Any] = Field(default_factory=list)

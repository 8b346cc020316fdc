"""Feed records and the persisted entities they are reconciled into."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from datetime import date, datetime


def new_id() -> UUID:
    return uuid4()


# Feed records ----------------------------------------------------------------


@dataclass(frozen=True, slots=True, kw_only=True)
class OrbitalElementRecord:
    """One general-perturbations element set as published by the orbital feed."""

    catalog_id: int
    object_name: str
    object_type: str | None
    country_code: str | None
    launch_date: date | None
    decay_date: date | None
    epoch: datetime
    tle_line1: str
    tle_line2: str
    inclination: float
    eccentricity: float
    period: float
    apoapsis: float
    periapsis: float
    semimajor_axis: float

    OBSERVED_FIELDS: ClassVar[tuple[str, ...]] = (
        "object_name",
        "object_type",
        "country_code",
        "launch_date",
        "decay_date",
        "epoch",
        "tle_line1",
        "tle_line2",
        "inclination",
        "eccentricity",
        "period",
        "apoapsis",
        "periapsis",
        "semimajor_axis",
    )

    @property
    def key(self) -> int:
        return self.catalog_id


@dataclass(frozen=True, slots=True, kw_only=True)
class SeismicEventRecord:
    """One event feature as published by the seismic feed.

    ``event_id`` may be reissued by the feed; ``known_ids`` carries every
    identifier the feed has used for the event, in feed order.
    """

    event_id: str
    known_ids: tuple[str, ...]
    feed_updated_at: datetime
    event_time: datetime
    magnitude: float | None
    place: str | None
    tz_offset_minutes: int | None
    cdi: float | None
    mmi: float | None
    alert: str | None
    status: str | None
    tsunami: int
    significance: int
    station_count: int | None
    min_station_distance: float | None
    event_type: str | None
    longitude: float
    latitude: float
    depth_km: float | None

    OBSERVED_FIELDS: ClassVar[tuple[str, ...]] = (
        "feed_updated_at",
        "event_time",
        "magnitude",
        "place",
        "tz_offset_minutes",
        "cdi",
        "mmi",
        "alert",
        "status",
        "tsunami",
        "significance",
        "station_count",
        "min_station_distance",
        "event_type",
        "longitude",
        "latitude",
        "depth_km",
    )

    @property
    def key(self) -> str:
        return self.event_id

    @property
    def alternate_ids(self) -> tuple[str, ...]:
        """Historical identifiers other than the current one, in feed order."""
        return tuple(value for value in self.known_ids if value != self.event_id)


type ExternalRecord = OrbitalElementRecord | SeismicEventRecord


# Persisted entities ----------------------------------------------------------


@dataclass(eq=False, kw_only=True)
class OrbitalObject:
    """Stored state of one catalogued space object."""

    id: UUID = field(default_factory=new_id)
    catalog_id: int
    object_name: str
    object_type: str | None = None
    country_code: str | None = None
    launch_date: date | None = None
    decay_date: date | None = None
    epoch: datetime
    tle_line1: str
    tle_line2: str
    inclination: float
    eccentricity: float
    period: float
    apoapsis: float
    periapsis: float
    semimajor_axis: float
    last_synced_at: datetime

    @property
    def key(self) -> int:
        return self.catalog_id

    def elements_match(self, record: OrbitalElementRecord) -> bool:
        return self.tle_line1 == record.tle_line1 and self.tle_line2 == record.tle_line2


@dataclass(eq=False, kw_only=True)
class SeismicEvent:
    """Stored state of one seismic event, tracked across identifier changes."""

    id: UUID = field(default_factory=new_id)
    event_id: str
    known_ids: frozenset[str] = field(default_factory=frozenset)
    feed_updated_at: datetime
    event_time: datetime
    magnitude: float | None = None
    place: str | None = None
    tz_offset_minutes: int | None = None
    cdi: float | None = None
    mmi: float | None = None
    alert: str | None = None
    status: str | None = None
    tsunami: int = 0
    significance: int = 0
    station_count: int | None = None
    min_station_distance: float | None = None
    event_type: str | None = None
    longitude: float
    latitude: float
    depth_km: float | None = None
    last_synced_at: datetime

    def __post_init__(self) -> None:
        self.known_ids = frozenset(self.known_ids) | {self.event_id}

    @property
    def key(self) -> str:
        return self.event_id

    def reassign_identifier(self, event_id: str, known_ids: tuple[str, ...] = ()) -> None:
        """Stamp a new current identifier, keeping every identifier seen so far."""
        self.event_id = event_id
        self.merge_identifiers(known_ids)

    def merge_identifiers(self, known_ids: tuple[str, ...]) -> None:
        self.known_ids = self.known_ids | set(known_ids) | {self.event_id}


type PersistedEntity = OrbitalObject | SeismicEvent

"""Selection criteria for feed fetches."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Final

# Notable long-lived objects kept in the default interest set.
INTEREST_CATALOG_IDS: Final[tuple[int, ...]] = (
    20580,  # Hubble
    25544,  # ISS
    48274,  # Tiangong
    39084,  # Landsat 8
    49260,  # Landsat 9
    27386,  # Envisat
    27424,  # Aqua
    25994,  # Terra
    41240,  # Jason-3
    39634,  # Sentinel-1A
    41456,  # Sentinel-1B
    40697,  # Sentinel-2A
    42063,  # Sentinel-2B
    43613,  # ICESat-2
    41866,  # GOES-16
    53106,  # GOES-18
)

CONSTELLATION_PREFIXES: Final[dict[str, str]] = {
    "starlink": "STARLINK",
    "oneweb": "ONEWEB",
    "iridium": "IRIDIUM",
}


@dataclass(frozen=True, slots=True)
class OrbitalQuery:
    """Object-selection criteria for the orbital element feed.

    Only objects that have not decayed and whose element set epoch lies within
    ``max_epoch_age_days`` are selected.
    """

    catalog_ids: tuple[int, ...] = ()
    name_contains: str | None = None
    max_epoch_age_days: int = 30
    order_by_catalog_id: bool = True

    @classmethod
    def all_active(cls) -> OrbitalQuery:
        return cls()

    @classmethod
    def interest_set(cls) -> OrbitalQuery:
        return cls(catalog_ids=INTEREST_CATALOG_IDS)

    @classmethod
    def by_name(cls, substring: str) -> OrbitalQuery:
        cleaned = substring.strip()
        if not cleaned:
            raise ValueError("Name filter must not be blank")
        return cls(name_contains=cleaned)

    @classmethod
    def by_catalog_id(cls, catalog_id: int) -> OrbitalQuery:
        return cls(catalog_ids=(catalog_id,), order_by_catalog_id=False)

    @classmethod
    def constellation(cls, name: str) -> OrbitalQuery:
        try:
            prefix = CONSTELLATION_PREFIXES[name.lower()]
        except KeyError:
            known = ", ".join(sorted(CONSTELLATION_PREFIXES))
            raise ValueError(f"Unknown constellation {name!r}; expected one of: {known}") from None
        return cls(name_contains=prefix)


@dataclass(frozen=True, slots=True)
class SeismicQuery:
    """Time window and magnitude floor for the seismic event feed."""

    start: date
    end: date
    min_magnitude: float = 2.5

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError("Seismic query start must not be after end")

    @classmethod
    def recent(
        cls,
        *,
        days: int = 1,
        min_magnitude: float = 2.5,
        now: datetime | None = None,
    ) -> SeismicQuery:
        anchor = (now or datetime.now(UTC)).astimezone(UTC)
        return cls(
            start=(anchor - timedelta(days=days)).date(),
            # endtime is exclusive at midnight, so extend through the current day
            end=(anchor + timedelta(days=1)).date(),
            min_magnitude=min_magnitude,
        )

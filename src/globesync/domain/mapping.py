"""Map brand-new feed records onto persisted entities."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .diff import observed_fields
from .model import OrbitalObject, SeismicEvent, new_id

if TYPE_CHECKING:
    from datetime import datetime

    from .model import OrbitalElementRecord, SeismicEventRecord


def to_orbital_object(record: OrbitalElementRecord, *, now: datetime) -> OrbitalObject:
    """Build the stored entity for a catalog object seen for the first time."""

    return OrbitalObject(
        id=new_id(),
        catalog_id=record.catalog_id,
        last_synced_at=now,
        **observed_fields(record),  # pyright: ignore[reportArgumentType]
    )


def to_seismic_event(record: SeismicEventRecord, *, now: datetime) -> SeismicEvent:
    """Build the stored entity for an event that matched no identifier in the store.

    ``last_synced_at`` is the mapping time, never the feed's own timestamp.
    """

    return SeismicEvent(
        id=new_id(),
        event_id=record.event_id,
        known_ids=frozenset(record.known_ids),
        last_synced_at=now,
        **observed_fields(record),  # pyright: ignore[reportArgumentType]
    )

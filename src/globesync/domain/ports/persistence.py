"""Ports for persisting reconciled entities."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from globesync.domain.model import OrbitalObject, SeismicEvent

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import datetime


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent entity store."""

    def add(self, entity: TEntity) -> None: ...

    def save(self, entity: TEntity) -> None: ...

    def delete_older_than(self, cutoff: datetime) -> int: ...


@runtime_checkable
class OrbitalObjectRepository(Repository[OrbitalObject], Protocol):
    """Persistence contract for catalogued space objects."""

    def get_by_catalog_id(self, catalog_id: int) -> OrbitalObject | None: ...

    def list_by_catalog_ids(self, catalog_ids: Iterable[int]) -> Sequence[OrbitalObject]: ...

    def search_by_name(self, substring: str) -> Sequence[OrbitalObject]: ...

    def list_all(self) -> Sequence[OrbitalObject]: ...


@runtime_checkable
class SeismicEventRepository(Repository[SeismicEvent], Protocol):
    """Persistence contract for seismic events."""

    def get_by_event_id(self, event_id: str) -> SeismicEvent | None: ...

    def get_by_alternate_id(self, identifier: str) -> SeismicEvent | None:
        """Return the event whose current or historical identifiers contain ``identifier``."""
        ...

    def list_recent(self, since: datetime) -> Sequence[SeismicEvent]: ...


@runtime_checkable
class StoreMaintenance(Protocol):
    """Bulk storage reclamation, independent of entity-level data."""

    def vacuum(self) -> None: ...

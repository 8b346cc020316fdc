"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, cast

from sqlalchemy import delete, select

from globesync.adapters.sqlalchemy.mappings import (
    orbital_object_table,
    seismic_event_alias_table,
    seismic_event_table,
)
from globesync.domain.model import OrbitalObject, SeismicEvent

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import datetime

    from sqlalchemy.orm import Session


class SqlAlchemyOrbitalObjectRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: OrbitalObject) -> None:
        self.session.add(entity)

    def save(self, entity: OrbitalObject) -> None:
        self.session.add(entity)
        self.session.flush()

    def get_by_catalog_id(self, catalog_id: int) -> OrbitalObject | None:
        stmt = select(OrbitalObject).where(orbital_object_table.c.catalog_id == catalog_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def list_by_catalog_ids(self, catalog_ids: Iterable[int]) -> Sequence[OrbitalObject]:
        wanted = sorted(set(catalog_ids))
        if not wanted:
            return []
        stmt = (
            select(OrbitalObject)
            .where(orbital_object_table.c.catalog_id.in_(wanted))
            .order_by(orbital_object_table.c.catalog_id)
        )
        return self.session.execute(stmt).scalars().all()

    def search_by_name(self, substring: str) -> Sequence[OrbitalObject]:
        stmt = (
            select(OrbitalObject)
            .where(orbital_object_table.c.object_name.ilike(f"%{substring}%"))
            .order_by(orbital_object_table.c.catalog_id)
        )
        return self.session.execute(stmt).scalars().all()

    def list_all(self) -> Sequence[OrbitalObject]:
        stmt = select(OrbitalObject).order_by(orbital_object_table.c.catalog_id)
        return self.session.execute(stmt).scalars().all()

    def delete_older_than(self, cutoff: datetime) -> int:
        stmt = delete(orbital_object_table).where(orbital_object_table.c.epoch < cutoff)
        result = self.session.execute(stmt)
        self.session.expire_all()
        return result.rowcount


class SqlAlchemySeismicEventRepository:
    """Seismic events plus the alias index used for reissued identifiers."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: SeismicEvent) -> None:
        self.session.add(entity)
        self.session.flush()
        self._sync_aliases(entity)

    def save(self, entity: SeismicEvent) -> None:
        self.session.add(entity)
        self.session.flush()
        self._sync_aliases(entity)

    def get_by_event_id(self, event_id: str) -> SeismicEvent | None:
        stmt = select(SeismicEvent).where(seismic_event_table.c.event_id == event_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def get_by_alternate_id(self, identifier: str) -> SeismicEvent | None:
        stmt = (
            select(seismic_event_alias_table.c.event_pk)
            .where(seismic_event_alias_table.c.identifier == identifier)
            .limit(1)
        )
        event_pk = self.session.execute(stmt).scalar_one_or_none()
        if isinstance(event_pk, uuid.UUID):
            return self.session.get(SeismicEvent, event_pk)
        return self.get_by_event_id(identifier)

    def list_recent(self, since: datetime) -> Sequence[SeismicEvent]:
        stmt = (
            select(SeismicEvent)
            .where(seismic_event_table.c.event_time >= since)
            .order_by(seismic_event_table.c.event_time.desc())
        )
        return self.session.execute(stmt).scalars().all()

    def delete_older_than(self, cutoff: datetime) -> int:
        expired = select(seismic_event_table.c.id).where(seismic_event_table.c.event_time < cutoff)
        self.session.execute(
            delete(seismic_event_alias_table).where(
                seismic_event_alias_table.c.event_pk.in_(expired)
            )
        )
        result = self.session.execute(
            delete(seismic_event_table).where(seismic_event_table.c.event_time < cutoff)
        )
        self.session.expire_all()
        return result.rowcount

    def _sync_aliases(self, entity: SeismicEvent) -> None:
        stmt = select(
            seismic_event_alias_table.c.identifier,
            seismic_event_alias_table.c.event_pk,
        ).where(seismic_event_alias_table.c.identifier.in_(sorted(entity.known_ids)))
        existing = {
            cast(str, identifier): cast(uuid.UUID, owner)
            for identifier, owner in self.session.execute(stmt).all()
        }
        for identifier in sorted(entity.known_ids):
            owner = existing.get(identifier)
            if owner == entity.id:
                continue
            if owner is not None:
                # Identifier moved to this event; the newest claim wins.
                self.session.execute(
                    seismic_event_alias_table.update()
                    .where(seismic_event_alias_table.c.identifier == identifier)
                    .values(event_pk=entity.id)
                )
                continue
            self.session.execute(
                seismic_event_alias_table.insert().values(identifier=identifier, event_pk=entity.id)
            )


if TYPE_CHECKING:
    from globesync.domain.ports.persistence import (
        OrbitalObjectRepository,
        SeismicEventRepository,
    )

    _orbital_check: OrbitalObjectRepository = SqlAlchemyOrbitalObjectRepository(
        cast("Session", None)
    )
    _seismic_check: SeismicEventRepository = SqlAlchemySeismicEventRepository(
        cast("Session", None)
    )

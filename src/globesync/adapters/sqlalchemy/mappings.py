"""SQLAlchemy mapping metadata for the feed entities."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Dialect,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    Uuid,
    orm,
)

from globesync.domain.model import OrbitalObject, SeismicEvent

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class IdentifierSetType(TypeDecorator[frozenset[str]]):
    """Store a set of feed identifiers as a sorted JSON array."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: frozenset[str] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(sorted(value))

    def process_result_value(self, value: str | None, dialect: Dialect) -> frozenset[str]:
        _ = dialect
        if value is None:
            return frozenset()
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return frozenset()
        items = cast(list[Any], loaded)
        return frozenset(item for item in items if isinstance(item, str))


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

orbital_object_table = Table(
    "orbital_object",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("catalog_id", Integer, nullable=False, unique=True),
    Column("object_name", String, nullable=False),
    Column("object_type", String, nullable=True),
    Column("country_code", String, nullable=True),
    Column("launch_date", Date, nullable=True),
    Column("decay_date", Date, nullable=True),
    Column("epoch", UTCDateTime(), nullable=False),
    Column("tle_line1", String(69), nullable=False),
    Column("tle_line2", String(69), nullable=False),
    Column("inclination", Float, nullable=False),
    Column("eccentricity", Float, nullable=False),
    Column("period", Float, nullable=False),
    Column("apoapsis", Float, nullable=False),
    Column("periapsis", Float, nullable=False),
    Column("semimajor_axis", Float, nullable=False),
    Column("last_synced_at", UTCDateTime(), nullable=False),
    Index("ix_orbital_object_epoch", "epoch"),
)

seismic_event_table = Table(
    "seismic_event",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("event_id", String, nullable=False, unique=True),
    Column("known_ids", IdentifierSetType(), nullable=False),
    Column("feed_updated_at", UTCDateTime(), nullable=False),
    Column("event_time", UTCDateTime(), nullable=False),
    Column("magnitude", Float, nullable=True),
    Column("place", String, nullable=True),
    Column("tz_offset_minutes", Integer, nullable=True),
    Column("cdi", Float, nullable=True),
    Column("mmi", Float, nullable=True),
    Column("alert", String, nullable=True),
    Column("status", String, nullable=True),
    Column("tsunami", Integer, nullable=False, default=0),
    Column("significance", Integer, nullable=False, default=0),
    Column("station_count", Integer, nullable=True),
    Column("min_station_distance", Float, nullable=True),
    Column("event_type", String, nullable=True),
    Column("longitude", Float, nullable=False),
    Column("latitude", Float, nullable=False),
    Column("depth_km", Float, nullable=True),
    Column("last_synced_at", UTCDateTime(), nullable=False),
    Index("ix_seismic_event_event_time", "event_time"),
)

# Lookup index from every identifier an event has carried to the event row.
# Kept in step with ``SeismicEvent.known_ids`` by the repository.
seismic_event_alias_table = Table(
    "seismic_event_alias",
    mapper_registry.metadata,
    Column("identifier", String, primary_key=True),
    Column(
        "event_pk",
        UUIDColumnType,
        ForeignKey("seismic_event.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
)


def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain entities (idempotent)."""

    if mapper_registry.mappers:
        return mapper_registry

    log.info("Starting SQLAlchemy mappers")
    mapper_registry.map_imperatively(OrbitalObject, orbital_object_table)
    mapper_registry.map_imperatively(SeismicEvent, seismic_event_table)
    orm.configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)

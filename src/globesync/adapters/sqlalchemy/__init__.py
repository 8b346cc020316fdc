"""SQLAlchemy adapter: mappings, repositories and the unit of work."""

from __future__ import annotations

from globesync.adapters.sqlalchemy.mappings import (
    create_all_tables,
    mapper_registry,
    start_mappers,
)
from globesync.adapters.sqlalchemy.repositories import (
    SqlAlchemyOrbitalObjectRepository,
    SqlAlchemySeismicEventRepository,
)

__all__ = [
    "SqlAlchemyOrbitalObjectRepository",
    "SqlAlchemySeismicEventRepository",
    "create_all_tables",
    "mapper_registry",
    "start_mappers",
]

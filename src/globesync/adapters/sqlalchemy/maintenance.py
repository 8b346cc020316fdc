"""Storage reclamation for the SQLAlchemy-backed store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from globesync.adapters.sqlalchemy.mappings import orbital_object_table, seismic_event_table
from globesync.domain.errors import MaintenanceFailure

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

VACUUMED_TABLES: tuple[str, ...] = (orbital_object_table.name, seismic_event_table.name)


class SqlAlchemyStoreMaintenance:
    """Run VACUUM/ANALYZE outside of a transaction block."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def _statements(self) -> list[str]:
        dialect = self.engine.dialect.name
        if dialect == "postgresql":
            return [f"VACUUM ANALYZE {table}" for table in VACUUMED_TABLES]
        if dialect == "sqlite":
            return ["VACUUM", "ANALYZE"]
        raise MaintenanceFailure(f"Maintenance is not supported for dialect {dialect!r}")

    def vacuum(self) -> None:
        statements = self._statements()
        try:
            with self.engine.connect().execution_options(isolation_level="AUTOCOMMIT") as conn:
                for statement in statements:
                    log.info("Running maintenance statement: %s", statement)
                    conn.execute(text(statement))
        except SQLAlchemyError as exc:
            raise MaintenanceFailure(f"Store maintenance failed: {exc}") from exc

"""Age-based retirement of stored entities and storage upkeep."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import MaintenanceFailure

if TYPE_CHECKING:
    from collections.abc import Callable

    from .ports.persistence import StoreMaintenance
    from .ports.unit_of_work import FeedUnitOfWork

log = getLogger(__name__)

RETENTION_WINDOW = timedelta(days=30)


@dataclass(frozen=True, slots=True)
class RetentionPolicy:
    """Retention windows per family.

    Seismic events age by their occurrence time, orbital objects by the epoch of
    their latest element set.
    """

    seismic: timedelta = RETENTION_WINDOW
    orbital: timedelta = RETENTION_WINDOW


@dataclass(frozen=True, slots=True)
class RetentionResult:
    seismic_deleted: int
    orbital_deleted: int

    @property
    def total(self) -> int:
        return self.seismic_deleted + self.orbital_deleted


def purge_expired(
    unit_of_work_factory: Callable[[], FeedUnitOfWork],
    *,
    policy: RetentionPolicy | None = None,
    now: datetime | None = None,
) -> RetentionResult:
    """Delete entities whose timestamp is strictly older than their retention window."""

    effective = policy or RetentionPolicy()
    anchor = now or datetime.now(UTC)
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        seismic_deleted = repositories.seismic_events.delete_older_than(anchor - effective.seismic)
        orbital_deleted = repositories.orbital_objects.delete_older_than(anchor - effective.orbital)
        uow.commit()

    log.info(
        "Retention removed %s seismic events and %s orbital objects",
        seismic_deleted,
        orbital_deleted,
    )
    return RetentionResult(seismic_deleted=seismic_deleted, orbital_deleted=orbital_deleted)


def run_maintenance(maintenance: StoreMaintenance) -> None:
    """Run bulk storage reclamation; failures surface as ``MaintenanceFailure``."""

    try:
        maintenance.vacuum()
    except MaintenanceFailure:
        raise
    except Exception as exc:
        raise MaintenanceFailure(f"Storage maintenance failed: {exc}") from exc
    log.info("Completed storage maintenance at %s", datetime.now(UTC).isoformat())

"""Match feed records against stored entities and decide how to write them.

Each reconcile call ends in exactly one of three outcomes:

* ``NOOP``: a stored entity matched and the feed signals no change; nothing is written.
* ``UPDATED``: a stored entity matched (directly or through a historical
  identifier) and its observational fields were overwritten.
* ``INSERTED``: nothing matched and a new entity was created.

Reconcilers never delete; retirement of stale rows belongs to the retention job.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from .diff import apply_changes, record_changes
from .mapping import to_orbital_object, to_seismic_event

if TYPE_CHECKING:
    from collections.abc import Callable

    from .model import (
        OrbitalElementRecord,
        OrbitalObject,
        PersistedEntity,
        SeismicEvent,
        SeismicEventRecord,
    )
    from .ports.persistence import OrbitalObjectRepository, SeismicEventRepository

log = getLogger(__name__)


class ReconcileOutcome(StrEnum):
    NOOP = "noop"
    UPDATED = "updated"
    INSERTED = "inserted"


@dataclass(frozen=True, slots=True)
class ReconcileResult[TEntity: PersistedEntity]:
    outcome: ReconcileOutcome
    entity: TEntity
    changed_fields: tuple[str, ...] = field(default_factory=tuple)
    matched_via: str | None = None

    @property
    def wrote(self) -> bool:
        return self.outcome is not ReconcileOutcome.NOOP


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class OrbitalReconciler:
    """Reconcile element sets keyed by their stable catalog number.

    The orbital feed has no update timestamp, so change detection compares both
    element lines instead.
    """

    clock: Callable[[], datetime] = _utcnow

    def reconcile(
        self,
        record: OrbitalElementRecord,
        repository: OrbitalObjectRepository,
    ) -> ReconcileResult[OrbitalObject]:
        existing = repository.get_by_catalog_id(record.catalog_id)
        if existing is None:
            entity = to_orbital_object(record, now=self.clock())
            repository.add(entity)
            log.debug("New orbital object %s discovered", record.catalog_id)
            return ReconcileResult(ReconcileOutcome.INSERTED, entity)

        if existing.elements_match(record):
            return ReconcileResult(ReconcileOutcome.NOOP, existing)

        changed = apply_changes(existing, record_changes(existing, record))
        existing.last_synced_at = self.clock()
        repository.save(existing)
        return ReconcileResult(ReconcileOutcome.UPDATED, existing, changed)


@dataclass(slots=True)
class SeismicReconciler:
    """Reconcile seismic events whose feed identifier may be reissued.

    Lookup order is the current identifier first, then each historical
    identifier the record lists, in feed order; the first hit wins.
    """

    clock: Callable[[], datetime] = _utcnow

    def reconcile(
        self,
        record: SeismicEventRecord,
        repository: SeismicEventRepository,
    ) -> ReconcileResult[SeismicEvent]:
        existing = repository.get_by_event_id(record.event_id)
        if existing is not None:
            # the feed's own timestamp is the change signal; identical content
            # republished under a bumped timestamp is still written
            if existing.feed_updated_at == record.feed_updated_at:
                return ReconcileResult(ReconcileOutcome.NOOP, existing)
            return self._overwrite(existing, record, repository, matched_via=record.event_id)

        for alternate in record.alternate_ids:
            existing = repository.get_by_alternate_id(alternate)
            if existing is None:
                continue
            log.info(
                "Seismic event %s reissued as %s (matched via %s)",
                existing.event_id,
                record.event_id,
                alternate,
            )
            return self._overwrite(existing, record, repository, matched_via=alternate)

        entity = to_seismic_event(record, now=self.clock())
        repository.add(entity)
        log.debug("New seismic event %s discovered", record.event_id)
        return ReconcileResult(ReconcileOutcome.INSERTED, entity)

    def _overwrite(
        self,
        existing: SeismicEvent,
        record: SeismicEventRecord,
        repository: SeismicEventRepository,
        *,
        matched_via: str,
    ) -> ReconcileResult[SeismicEvent]:
        previous_ids = existing.known_ids
        changed = apply_changes(existing, record_changes(existing, record))
        if existing.event_id != record.event_id:
            existing.reassign_identifier(record.event_id, record.known_ids)
            changed = ("event_id", *changed)
        else:
            existing.merge_identifiers(record.known_ids)
        if existing.known_ids != previous_ids:
            changed = (*changed, "known_ids")
        existing.last_synced_at = self.clock()
        repository.save(existing)
        return ReconcileResult(
            ReconcileOutcome.UPDATED,
            existing,
            changed,
            matched_via=matched_via,
        )

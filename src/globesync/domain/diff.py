"""Field-level diff between stored entities and incoming feed records."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .model import ExternalRecord, PersistedEntity


def observed_fields(record: ExternalRecord) -> dict[str, object]:
    """Return the observational values a record carries, keyed by entity attribute."""

    return {name: getattr(record, name) for name in record.OBSERVED_FIELDS}


def current_fields(entity: PersistedEntity, names: Iterable[str]) -> dict[str, object]:
    return {name: getattr(entity, name) for name in names}


def diff_fields(
    current: Mapping[str, object],
    incoming: Mapping[str, object],
) -> dict[str, object]:
    """Return the subset of ``incoming`` whose values differ from ``current``."""

    return {
        name: value
        for name, value in incoming.items()
        if name not in current or current[name] != value
    }


def apply_changes(entity: PersistedEntity, changes: Mapping[str, object]) -> tuple[str, ...]:
    """Write ``changes`` onto ``entity`` and return the names that were written."""

    for name, value in changes.items():
        setattr(entity, name, value)
    return tuple(changes)


def record_changes(entity: PersistedEntity, record: ExternalRecord) -> dict[str, object]:
    incoming = observed_fields(record)
    return diff_fields(current_fields(entity, incoming), incoming)

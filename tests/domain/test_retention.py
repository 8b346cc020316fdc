from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from globesync.domain.errors import MaintenanceFailure
from globesync.domain.mapping import to_orbital_object, to_seismic_event
from globesync.domain.retention import (
    RETENTION_WINDOW,
    RetentionPolicy,
    purge_expired,
    run_maintenance,
)
from tests.helpers.feeds import FakeUnitOfWorkFactory, make_orbital_record, make_seismic_record

NOW = datetime(2024, 6, 30, tzinfo=UTC)


def test_purge_deletes_strictly_older_entities_per_family() -> None:
    uow_factory = FakeUnitOfWorkFactory()
    cutoff = NOW - RETENTION_WINDOW
    for event_id, event_time in (
        ("old", cutoff - timedelta(seconds=1)),
        ("edge", cutoff),
        ("new", NOW - timedelta(days=1)),
    ):
        record = make_seismic_record(event_id, event_time=event_time)
        uow_factory.seismic_events.add(to_seismic_event(record, now=NOW))
    uow_factory.orbital_objects.add(
        to_orbital_object(make_orbital_record(1, epoch=cutoff - timedelta(days=3)), now=NOW)
    )
    uow_factory.orbital_objects.add(
        to_orbital_object(make_orbital_record(2, epoch=NOW), now=NOW)
    )

    result = purge_expired(uow_factory, now=NOW)

    assert result.seismic_deleted == 1
    assert result.orbital_deleted == 1
    assert result.total == 2
    assert [item.event_id for item in uow_factory.seismic_events.items] == ["edge", "new"]
    assert list(uow_factory.orbital_objects.items) == [2]
    assert uow_factory.commits == 1


def test_purge_uses_policy_windows() -> None:
    uow_factory = FakeUnitOfWorkFactory()
    record = make_seismic_record("week", event_time=NOW - timedelta(days=8))
    uow_factory.seismic_events.add(to_seismic_event(record, now=NOW))

    result = purge_expired(
        uow_factory,
        policy=RetentionPolicy(seismic=timedelta(days=7)),
        now=NOW,
    )

    assert result.seismic_deleted == 1


def test_purge_ignores_last_synced_timestamp() -> None:
    uow_factory = FakeUnitOfWorkFactory()
    record = make_seismic_record("recent", event_time=NOW - timedelta(days=2))
    uow_factory.seismic_events.add(to_seismic_event(record, now=NOW - timedelta(days=90)))

    assert purge_expired(uow_factory, now=NOW).seismic_deleted == 0


class _Maintenance:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls = 0

    def vacuum(self) -> None:
        self.calls += 1
        if self.error is not None:
            raise self.error


def test_run_maintenance_invokes_vacuum() -> None:
    maintenance = _Maintenance()

    run_maintenance(maintenance)

    assert maintenance.calls == 1


def test_run_maintenance_wraps_unexpected_errors() -> None:
    with pytest.raises(MaintenanceFailure, match="disk full"):
        run_maintenance(_Maintenance(OSError("disk full")))


def test_run_maintenance_keeps_maintenance_failures() -> None:
    original = MaintenanceFailure("unsupported dialect")

    with pytest.raises(MaintenanceFailure) as exc:
        run_maintenance(_Maintenance(original))

    assert exc.value is original

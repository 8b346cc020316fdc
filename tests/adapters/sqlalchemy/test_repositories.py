from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import select

from globesync.adapters.sqlalchemy.mappings import seismic_event_alias_table
from globesync.adapters.sqlalchemy.repositories import (
    SqlAlchemyOrbitalObjectRepository,
    SqlAlchemySeismicEventRepository,
)
from globesync.domain.mapping import to_orbital_object, to_seismic_event
from tests.helpers.feeds import make_orbital_record, make_seismic_record

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

NOW = datetime(2024, 6, 30, tzinfo=UTC)


def _aliases(session: Session) -> dict[str, object]:
    rows = session.execute(
        select(seismic_event_alias_table.c.identifier, seismic_event_alias_table.c.event_pk)
    ).all()
    return {identifier: owner for identifier, owner in rows}


def test_orbital_repository_round_trip(sqlite_session: Session) -> None:
    repository = SqlAlchemyOrbitalObjectRepository(sqlite_session)
    entity = to_orbital_object(make_orbital_record(), now=NOW)
    repository.add(entity)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = repository.get_by_catalog_id(25544)

    assert loaded is not None
    assert loaded.id == entity.id
    assert loaded.epoch == entity.epoch
    assert loaded.epoch.tzinfo is not None
    assert loaded.tle_line1 == entity.tle_line1
    assert repository.get_by_catalog_id(1) is None


def test_orbital_repository_queries(sqlite_session: Session) -> None:
    repository = SqlAlchemyOrbitalObjectRepository(sqlite_session)
    objects = ((44713, "STARLINK-1007"), (25544, "ISS (ZARYA)"), (44714, "STARLINK-1008"))
    for catalog_id, name in objects:
        record = make_orbital_record(catalog_id, object_name=name)
        repository.add(to_orbital_object(record, now=NOW))
    sqlite_session.commit()

    assert [item.catalog_id for item in repository.search_by_name("starlink")] == [44713, 44714]
    assert [item.catalog_id for item in repository.list_by_catalog_ids([44714, 25544, 1])] == [
        25544,
        44714,
    ]
    assert repository.list_by_catalog_ids([]) == []
    assert [item.catalog_id for item in repository.list_all()] == [25544, 44713, 44714]


def test_seismic_repository_keeps_alias_index_in_step(sqlite_session: Session) -> None:
    repository = SqlAlchemySeismicEventRepository(sqlite_session)
    entity = to_seismic_event(make_seismic_record("us001"), now=NOW)
    repository.add(entity)
    sqlite_session.commit()

    assert _aliases(sqlite_session) == {"us001": entity.id}

    entity.reassign_identifier("us002", ("us001", "us002"))
    repository.save(entity)
    sqlite_session.commit()

    assert _aliases(sqlite_session) == {"us001": entity.id, "us002": entity.id}
    assert repository.get_by_event_id("us001") is None
    assert repository.get_by_alternate_id("us001") is entity
    assert repository.get_by_alternate_id("us002") is entity
    assert repository.get_by_alternate_id("nc404") is None


def test_known_ids_column_round_trips_as_frozenset(sqlite_session: Session) -> None:
    repository = SqlAlchemySeismicEventRepository(sqlite_session)
    record = make_seismic_record("us2", known_ids=("at1", "us2"))
    repository.add(to_seismic_event(record, now=NOW))
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = repository.get_by_event_id("us2")

    assert loaded is not None
    assert loaded.known_ids == frozenset({"at1", "us2"})
    assert loaded.feed_updated_at == record.feed_updated_at


def test_alias_moves_to_newest_claimant(sqlite_session: Session) -> None:
    repository = SqlAlchemySeismicEventRepository(sqlite_session)
    first = to_seismic_event(make_seismic_record("ak1"), now=NOW)
    second = to_seismic_event(make_seismic_record("nc2"), now=NOW)
    repository.add(first)
    repository.add(second)

    second.merge_identifiers(("ak1",))
    repository.save(second)
    sqlite_session.commit()

    assert _aliases(sqlite_session)["ak1"] == second.id
    assert repository.get_by_event_id("ak1") is first


def test_list_recent_orders_newest_first(sqlite_session: Session) -> None:
    repository = SqlAlchemySeismicEventRepository(sqlite_session)
    for event_id, hours in (("a", 30), ("b", 2), ("c", 5)):
        record = make_seismic_record(event_id, event_time=NOW - timedelta(hours=hours))
        repository.add(to_seismic_event(record, now=NOW))
    sqlite_session.commit()

    recent = repository.list_recent(NOW - timedelta(days=1))

    assert [item.event_id for item in recent] == ["b", "c"]


def test_delete_older_than_removes_rows_and_aliases(sqlite_session: Session) -> None:
    seismic = SqlAlchemySeismicEventRepository(sqlite_session)
    orbital = SqlAlchemyOrbitalObjectRepository(sqlite_session)
    cutoff = NOW - timedelta(days=30)
    old = make_seismic_record(
        "old", known_ids=("old0", "old"), event_time=cutoff - timedelta(hours=1)
    )
    seismic.add(to_seismic_event(old, now=NOW))
    seismic.add(to_seismic_event(make_seismic_record("edge", event_time=cutoff), now=NOW))
    stale = make_orbital_record(1, epoch=cutoff - timedelta(days=1))
    orbital.add(to_orbital_object(stale, now=NOW))
    orbital.add(to_orbital_object(make_orbital_record(2, epoch=NOW), now=NOW))
    sqlite_session.commit()

    assert seismic.delete_older_than(cutoff) == 1
    assert orbital.delete_older_than(cutoff) == 1
    sqlite_session.commit()

    assert seismic.get_by_event_id("old") is None
    assert seismic.get_by_event_id("edge") is not None
    assert set(_aliases(sqlite_session)) == {"edge"}
    assert [item.catalog_id for item in orbital.list_all()] == [2]

"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from globesync.adapters.spacetrack import SpaceTrackClient
from globesync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyUnitOfWork,
    is_started,
    startup,
    store_maintenance,
)
from globesync.adapters.usgs import UsgsClient
from globesync.config import (
    SyncConfig,
    get_spacetrack_config,
    get_sync_config,
    get_usgs_config,
)
from globesync.domain.ports.unit_of_work import FeedUnitOfWork
from globesync.domain.queries import INTEREST_CATALOG_IDS, OrbitalQuery, SeismicQuery
from globesync.domain.reconciliation import OrbitalReconciler, SeismicReconciler
from globesync.domain.retention import (
    RetentionPolicy,
    RetentionResult,
    purge_expired,
    run_maintenance,
)
from globesync.domain.sync import RecordSync, SyncPassResult, run_sync_pass

if TYPE_CHECKING:
    from collections.abc import Sequence

    from globesync.domain.model import (
        OrbitalElementRecord,
        OrbitalObject,
        SeismicEvent,
        SeismicEventRecord,
    )
    from globesync.domain.ports.fetching import (
        FetchResult,
        OrbitalElementFetcher,
        SeismicEventFetcher,
    )
    from globesync.domain.ports.persistence import StoreMaintenance

UnitOfWorkFactory = Callable[[], FeedUnitOfWork]
ResultCallback = Callable[[SyncPassResult], None]
ErrorCallback = Callable[[BaseException], None]


log = getLogger(__name__)


def build_spacetrack_fetcher() -> OrbitalElementFetcher:
    """Return a Space-Track client; keep one per process so its login is reused."""

    return SpaceTrackClient(get_spacetrack_config())


def build_usgs_fetcher() -> SeismicEventFetcher:
    return UsgsClient(get_usgs_config())


def _resolve_unit_of_work(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    # may migrate the store; async callers run this in a worker thread
    if factory is not None:
        return factory
    if not is_started():
        startup()
    return SqlAlchemyUnitOfWork


async def sync_orbital_objects(
    *,
    query: OrbitalQuery | None = None,
    fetcher: OrbitalElementFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: SyncConfig | None = None,
    on_result: ResultCallback | None = None,
    on_error: ErrorCallback | None = None,
) -> SyncPassResult:
    """Reconcile the orbital element feed into the store."""

    effective_query = query or OrbitalQuery.all_active()
    effective_fetcher = fetcher or build_spacetrack_fetcher()
    effective_uow = await asyncio.to_thread(_resolve_unit_of_work, unit_of_work_factory)
    settings = config or get_sync_config()

    async def fetch() -> FetchResult[OrbitalElementRecord]:
        return await effective_fetcher.fetch(effective_query)

    return await run_sync_pass(
        family="orbital",
        fetch=fetch,
        reconcile_one=RecordSync(
            reconciler=OrbitalReconciler(),
            repository=lambda repositories: repositories.orbital_objects,
            unit_of_work_factory=effective_uow,
            timeout=settings.record_timeout_seconds,
        ),
        concurrency=settings.concurrency,
        record_timeout=settings.record_timeout_seconds,
        fetch_timeout=settings.feed_timeout_seconds,
        on_result=on_result,
        on_error=on_error,
    )


async def sync_seismic_events(
    *,
    query: SeismicQuery | None = None,
    fetcher: SeismicEventFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: SyncConfig | None = None,
    on_result: ResultCallback | None = None,
    on_error: ErrorCallback | None = None,
) -> SyncPassResult:
    """Reconcile the seismic event feed into the store."""

    effective_query = query or SeismicQuery.recent()
    effective_fetcher = fetcher or build_usgs_fetcher()
    effective_uow = await asyncio.to_thread(_resolve_unit_of_work, unit_of_work_factory)
    settings = config or get_sync_config()

    async def fetch() -> FetchResult[SeismicEventRecord]:
        return await effective_fetcher.fetch(effective_query)

    return await run_sync_pass(
        family="seismic",
        fetch=fetch,
        reconcile_one=RecordSync(
            reconciler=SeismicReconciler(),
            repository=lambda repositories: repositories.seismic_events,
            unit_of_work_factory=effective_uow,
            timeout=settings.record_timeout_seconds,
        ),
        concurrency=settings.concurrency,
        record_timeout=settings.record_timeout_seconds,
        fetch_timeout=settings.feed_timeout_seconds,
        on_result=on_result,
        on_error=on_error,
    )


async def populate_orbital_objects(
    *,
    fetcher: OrbitalElementFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: SyncConfig | None = None,
) -> SyncPassResult:
    """Re-populate the store with every active object on demand."""

    log.info("Populating orbital objects from the full active catalogue")
    return await sync_orbital_objects(
        query=OrbitalQuery.all_active(),
        fetcher=fetcher,
        unit_of_work_factory=unit_of_work_factory,
        config=config,
    )


def purge_expired_entities(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: SyncConfig | None = None,
    now: datetime | None = None,
) -> RetentionResult:
    settings = config or get_sync_config()
    policy = RetentionPolicy(
        seismic=settings.seismic_retention,
        orbital=settings.orbital_retention,
    )
    return purge_expired(_resolve_unit_of_work(unit_of_work_factory), policy=policy, now=now)


def run_store_maintenance(*, maintenance: StoreMaintenance | None = None) -> None:
    if maintenance is None:
        if not is_started():
            startup()
        maintenance = store_maintenance()
    run_maintenance(maintenance)


# Read queries ----------------------------------------------------------------


def list_interest_objects(
    *, unit_of_work_factory: UnitOfWorkFactory | None = None
) -> Sequence[OrbitalObject]:
    with _resolve_unit_of_work(unit_of_work_factory)() as uow:
        return uow.repositories.orbital_objects.list_by_catalog_ids(INTEREST_CATALOG_IDS)


def search_orbital_objects(
    name: str, *, unit_of_work_factory: UnitOfWorkFactory | None = None
) -> Sequence[OrbitalObject]:
    cleaned = name.strip()
    if not cleaned:
        raise ValueError("Name filter must not be blank")
    with _resolve_unit_of_work(unit_of_work_factory)() as uow:
        return uow.repositories.orbital_objects.search_by_name(cleaned)


def get_orbital_object(
    catalog_id: int, *, unit_of_work_factory: UnitOfWorkFactory | None = None
) -> OrbitalObject | None:
    with _resolve_unit_of_work(unit_of_work_factory)() as uow:
        return uow.repositories.orbital_objects.get_by_catalog_id(catalog_id)


def list_recent_seismic_events(
    days: int = 1,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    now: datetime | None = None,
) -> Sequence[SeismicEvent]:
    if days < 1:
        raise ValueError("days must be at least 1")
    since = (now or datetime.now(UTC)) - timedelta(days=days)
    with _resolve_unit_of_work(unit_of_work_factory)() as uow:
        return uow.repositories.seismic_events.list_recent(since)

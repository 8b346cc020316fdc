"""Cadence wiring: run each sync, retention and maintenance action on its crontab."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from globesync import app
from globesync.config import ScheduleConfig, SyncConfig, get_schedule_config, get_sync_config

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from apscheduler.job import Job

    from globesync.app import UnitOfWorkFactory
    from globesync.domain.ports.fetching import OrbitalElementFetcher, SeismicEventFetcher
    from globesync.domain.ports.persistence import StoreMaintenance

    Action = Callable[[], Awaitable[object]]

log = getLogger(__name__)

ORBITAL_SYNC = "orbital-sync"
SEISMIC_SYNC = "seismic-sync"
RETENTION = "retention"
MAINTENANCE = "maintenance"


class SyncScheduler:
    """Named recurring actions on an asyncio scheduler.

    Each action runs at most once at a time; missed ticks are coalesced into a
    single run. Any error an action raises is logged and the next tick runs
    as usual.
    """

    def __init__(self, scheduler: AsyncIOScheduler | None = None) -> None:
        self._scheduler = scheduler or AsyncIOScheduler(
            event_loop=asyncio.get_running_loop(), timezone="UTC"
        )

    @property
    def scheduler(self) -> AsyncIOScheduler:
        return self._scheduler

    def register(self, name: str, action: Action, crontab: str) -> Job:
        trigger = CronTrigger.from_crontab(crontab, timezone="UTC")
        log.info("Scheduling %s with %r", name, crontab)
        return self._scheduler.add_job(
            _guarded(name, action),
            trigger=trigger,
            id=name,
            name=name,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )

    def job_names(self) -> list[str]:
        return sorted(job.id for job in self._scheduler.get_jobs())

    def start(self) -> None:
        self._scheduler.start()

    def shutdown(self, *, wait: bool = False) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)


def _guarded(name: str, action: Action) -> Callable[[], Awaitable[None]]:
    async def run() -> None:
        try:
            await action()
        except TimeoutError:
            log.error("Scheduled action %s timed out", name)  # noqa: TRY400
        except Exception:
            log.exception("Scheduled action %s failed", name)

    run.__name__ = f"run_{name.replace('-', '_')}"
    return run


def build_sync_scheduler(
    *,
    schedule: ScheduleConfig | None = None,
    orbital_fetcher: OrbitalElementFetcher | None = None,
    seismic_fetcher: SeismicEventFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    maintenance: StoreMaintenance | None = None,
    scheduler: AsyncIOScheduler | None = None,
    config: SyncConfig | None = None,
) -> SyncScheduler:
    """Register the four recurring actions with long-lived fetchers.

    The orbital fetcher is built once so its login session is reused by every
    pass for the lifetime of the process. Retention and maintenance give up
    after the configured store timeout and are reported as failed runs.
    """

    cadence = schedule or get_schedule_config()
    orbital = orbital_fetcher or app.build_spacetrack_fetcher()
    seismic = seismic_fetcher or app.build_usgs_fetcher()
    settings = config or get_sync_config()

    async def sync_orbital() -> None:
        await app.sync_orbital_objects(
            fetcher=orbital, unit_of_work_factory=unit_of_work_factory, config=settings
        )

    async def sync_seismic() -> None:
        await app.sync_seismic_events(
            fetcher=seismic, unit_of_work_factory=unit_of_work_factory, config=settings
        )

    async def purge() -> None:
        async with asyncio.timeout(settings.store_timeout_seconds):
            await asyncio.to_thread(
                app.purge_expired_entities,
                unit_of_work_factory=unit_of_work_factory,
                config=settings,
            )

    async def maintain() -> None:
        async with asyncio.timeout(settings.store_timeout_seconds):
            await asyncio.to_thread(app.run_store_maintenance, maintenance=maintenance)

    sync_scheduler = SyncScheduler(scheduler)
    sync_scheduler.register(ORBITAL_SYNC, sync_orbital, cadence.orbital_sync)
    sync_scheduler.register(SEISMIC_SYNC, sync_seismic, cadence.seismic_sync)
    sync_scheduler.register(RETENTION, purge, cadence.retention)
    sync_scheduler.register(MAINTENANCE, maintain, cadence.maintenance)
    return sync_scheduler

from __future__ import annotations

import asyncio
import logging
import threading

import pytest
from apscheduler.triggers.cron import CronTrigger

from globesync.config import ScheduleConfig, SyncConfig
from globesync.domain.errors import FeedUnavailable
from globesync.domain.ports.fetching import FetchResult
from globesync.domain.queries import OrbitalQuery, SeismicQuery
from globesync.scheduler import (
    MAINTENANCE,
    ORBITAL_SYNC,
    RETENTION,
    SEISMIC_SYNC,
    SyncScheduler,
    build_sync_scheduler,
)
from tests.helpers.feeds import (
    FakeOrbitalFetcher,
    FakeSeismicFetcher,
    FakeUnitOfWorkFactory,
    make_orbital_record,
)


class RecordingMaintenance:
    def __init__(self) -> None:
        self.runs = 0

    def vacuum(self) -> None:
        self.runs += 1


class HangingMaintenance:
    def __init__(self) -> None:
        self.release = threading.Event()

    def vacuum(self) -> None:
        self.release.wait(timeout=5)


class BrokenSeismicFetcher:
    async def fetch(self, query: SeismicQuery) -> FetchResult[object]:
        raise FeedUnavailable("usgs", "HTTP 503")


def test_registers_one_job_per_action() -> None:
    async def scenario() -> dict[str, str]:
        sync_scheduler = build_sync_scheduler(
            schedule=ScheduleConfig(seismic_sync="*/5 * * * *"),
            orbital_fetcher=FakeOrbitalFetcher(),
            seismic_fetcher=FakeSeismicFetcher(),
            unit_of_work_factory=FakeUnitOfWorkFactory(),
            maintenance=RecordingMaintenance(),
        )
        assert sync_scheduler.job_names() == sorted(
            [ORBITAL_SYNC, SEISMIC_SYNC, RETENTION, MAINTENANCE]
        )
        jobs = sync_scheduler.scheduler.get_jobs()
        for job in jobs:
            assert isinstance(job.trigger, CronTrigger)
            assert job.max_instances == 1
            assert job.coalesce is True
        return {job.id: str(job.trigger) for job in jobs}

    triggers = asyncio.run(scenario())

    assert "minute='*/5'" in triggers[SEISMIC_SYNC]
    assert "hour='*'" in triggers[ORBITAL_SYNC]
    assert "minute='0'" in triggers[ORBITAL_SYNC]


def test_scheduled_actions_run_against_injected_ports() -> None:
    orbital_fetcher = FakeOrbitalFetcher([make_orbital_record(25544)])
    seismic_fetcher = FakeSeismicFetcher()
    uow_factory = FakeUnitOfWorkFactory()
    maintenance = RecordingMaintenance()

    async def scenario() -> None:
        sync_scheduler = build_sync_scheduler(
            schedule=ScheduleConfig(),
            orbital_fetcher=orbital_fetcher,
            seismic_fetcher=seismic_fetcher,
            unit_of_work_factory=uow_factory,
            maintenance=maintenance,
        )
        jobs = {job.id: job for job in sync_scheduler.scheduler.get_jobs()}
        for name in (ORBITAL_SYNC, SEISMIC_SYNC, RETENTION, MAINTENANCE):
            await jobs[name].func()

    asyncio.run(scenario())

    assert orbital_fetcher.queries == [OrbitalQuery.all_active()]
    assert len(seismic_fetcher.queries) == 1
    assert 25544 in uow_factory.orbital_objects.items
    assert maintenance.runs == 1


def test_failing_action_is_logged_and_swallowed(caplog: pytest.LogCaptureFixture) -> None:
    async def scenario() -> None:
        sync_scheduler = build_sync_scheduler(
            schedule=ScheduleConfig(),
            orbital_fetcher=FakeOrbitalFetcher(),
            seismic_fetcher=BrokenSeismicFetcher(),  # type: ignore[arg-type]
            unit_of_work_factory=FakeUnitOfWorkFactory(),
            maintenance=RecordingMaintenance(),
        )
        job = sync_scheduler.scheduler.get_job(SEISMIC_SYNC)
        assert job is not None
        await job.func()

    with caplog.at_level(logging.ERROR, logger="globesync.scheduler"):
        asyncio.run(scenario())

    assert "Scheduled action seismic-sync failed" in caplog.text


def test_start_and_shutdown() -> None:
    async def noop() -> None:
        return None

    async def scenario() -> tuple[bool, bool]:
        sync_scheduler = SyncScheduler()
        sync_scheduler.register("heartbeat", noop, "0 0 * * *")
        sync_scheduler.start()
        running = sync_scheduler.scheduler.running
        sync_scheduler.shutdown()
        return running, sync_scheduler.scheduler.running

    assert asyncio.run(scenario()) == (True, False)


def test_invalid_crontab_is_rejected() -> None:
    async def noop() -> None:
        return None

    async def scenario() -> None:
        SyncScheduler().register("heartbeat", noop, "not a crontab")

    with pytest.raises(ValueError):
        asyncio.run(scenario())


def test_hanging_maintenance_times_out_and_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    maintenance = HangingMaintenance()

    async def scenario() -> None:
        sync_scheduler = build_sync_scheduler(
            schedule=ScheduleConfig(),
            orbital_fetcher=FakeOrbitalFetcher(),
            seismic_fetcher=FakeSeismicFetcher(),
            unit_of_work_factory=FakeUnitOfWorkFactory(),
            maintenance=maintenance,
            config=SyncConfig(store_timeout_seconds=0.05),
        )
        job = sync_scheduler.scheduler.get_job(MAINTENANCE)
        assert job is not None
        try:
            await asyncio.wait_for(job.func(), timeout=2)
        finally:
            maintenance.release.set()

    with caplog.at_level(logging.ERROR, logger="globesync.scheduler"):
        asyncio.run(scenario())

    assert "Scheduled action maintenance timed out" in caplog.text

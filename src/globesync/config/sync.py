"""Synchronization and scheduling defaults."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .env import env_float, env_int, env_or_default

DEFAULT_ORBITAL_CRON = "0 * * * *"
DEFAULT_SEISMIC_CRON = "*/15 * * * *"
DEFAULT_RETENTION_CRON = "30 0 * * *"
DEFAULT_MAINTENANCE_CRON = "0 0 * * *"

DEFAULT_SYNC_CONCURRENCY = 8
DEFAULT_RECORD_TIMEOUT_SECONDS = 30.0
DEFAULT_FEED_TIMEOUT_SECONDS = 300.0
DEFAULT_STORE_TIMEOUT_SECONDS = 900.0
DEFAULT_RETENTION_WINDOW = timedelta(days=30)


@dataclass(frozen=True, slots=True)
class ScheduleConfig:
    """Crontab expressions for each recurring action."""

    orbital_sync: str = DEFAULT_ORBITAL_CRON
    seismic_sync: str = DEFAULT_SEISMIC_CRON
    retention: str = DEFAULT_RETENTION_CRON
    maintenance: str = DEFAULT_MAINTENANCE_CRON


@dataclass(frozen=True, slots=True)
class SyncConfig:
    concurrency: int = DEFAULT_SYNC_CONCURRENCY
    record_timeout_seconds: float = DEFAULT_RECORD_TIMEOUT_SECONDS
    feed_timeout_seconds: float = DEFAULT_FEED_TIMEOUT_SECONDS
    store_timeout_seconds: float = DEFAULT_STORE_TIMEOUT_SECONDS
    seismic_retention: timedelta = DEFAULT_RETENTION_WINDOW
    orbital_retention: timedelta = DEFAULT_RETENTION_WINDOW


def get_schedule_config() -> ScheduleConfig:
    return ScheduleConfig(
        orbital_sync=env_or_default("GLOBESYNC_ORBITAL_CRON", DEFAULT_ORBITAL_CRON),
        seismic_sync=env_or_default("GLOBESYNC_SEISMIC_CRON", DEFAULT_SEISMIC_CRON),
        retention=env_or_default("GLOBESYNC_RETENTION_CRON", DEFAULT_RETENTION_CRON),
        maintenance=env_or_default("GLOBESYNC_MAINTENANCE_CRON", DEFAULT_MAINTENANCE_CRON),
    )


def get_sync_config() -> SyncConfig:
    return SyncConfig(
        concurrency=env_int("GLOBESYNC_SYNC_CONCURRENCY", DEFAULT_SYNC_CONCURRENCY),
        record_timeout_seconds=env_float(
            "GLOBESYNC_RECORD_TIMEOUT", DEFAULT_RECORD_TIMEOUT_SECONDS
        ),
        feed_timeout_seconds=env_float("GLOBESYNC_FEED_TIMEOUT", DEFAULT_FEED_TIMEOUT_SECONDS),
        store_timeout_seconds=env_float(
            "GLOBESYNC_STORE_TIMEOUT", DEFAULT_STORE_TIMEOUT_SECONDS
        ),
    )

"""Application configuration helpers."""

from __future__ import annotations

from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .spacetrack import SpaceTrackConfig, get_spacetrack_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .sync import ScheduleConfig, SyncConfig, get_schedule_config, get_sync_config
from .usgs import UsgsConfig, get_usgs_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "ScheduleConfig",
    "SpaceTrackConfig",
    "StorageConfig",
    "SyncConfig",
    "UsgsConfig",
    "configure_logging",
    "get_database_config",
    "get_schedule_config",
    "get_spacetrack_config",
    "get_storage_config",
    "get_sync_config",
    "get_usgs_config",
    "require_env_var",
    "require_env_vars",
]

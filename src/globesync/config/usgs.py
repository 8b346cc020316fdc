"""USGS earthquake feed configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, env_or_default
from .http_resilience import CacheConfig, ResilienceConfig, RetryPolicy

USGS_BASE_URL = "https://earthquake.usgs.gov/fdsnws/event/1"
USGS_QUERY_PATH = "/query"
USGS_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class UsgsConfig:
    resilience: ResilienceConfig
    query_path: str = USGS_QUERY_PATH


def get_usgs_config(*, resilience: ResilienceConfig | None = None) -> UsgsConfig:
    return UsgsConfig(
        resilience=resilience
        or ResilienceConfig(
            name="usgs",
            base_url=env_or_default("USGS_BASE_URL", USGS_BASE_URL),
            timeout_seconds=env_float("USGS_TIMEOUT", USGS_TIMEOUT_SECONDS),
            retry=RetryPolicy(total=3),
            cache=CacheConfig.in_memory(ttl_seconds=60.0),
            default_headers={"Accept": "application/geo+json"},
        ),
    )

"""Space-Track configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, env_or_default, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

SPACETRACK_BASE_URL = "https://www.space-track.org"
SPACETRACK_LOGIN_PATH = "/ajaxauth/login"
SPACETRACK_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class SpaceTrackConfig:
    """Holds Space-Track credentials and client settings."""

    username: str
    password: str
    resilience: ResilienceConfig
    login_path: str = SPACETRACK_LOGIN_PATH


def get_spacetrack_config(*, resilience: ResilienceConfig | None = None) -> SpaceTrackConfig:
    values = require_env_vars(("SPACETRACK_USERNAME", "SPACETRACK_PASSWORD"))
    return SpaceTrackConfig(
        username=values["SPACETRACK_USERNAME"],
        password=values["SPACETRACK_PASSWORD"],
        resilience=resilience
        or ResilienceConfig(
            name="spacetrack",
            base_url=env_or_default("SPACETRACK_BASE_URL", SPACETRACK_BASE_URL),
            timeout_seconds=env_float("SPACETRACK_TIMEOUT", SPACETRACK_TIMEOUT_SECONDS),
            # Space-Track allows 30 requests per minute per account
            ratelimit=RateLimit.per_minute(30),
            retry=RetryPolicy(total=3),
            cache=None,
        ),
    )

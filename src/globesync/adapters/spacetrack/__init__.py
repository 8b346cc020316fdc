"""Public interface for the Space-Track adapter."""

from __future__ import annotations

from .client import SpaceTrackAuthenticator, SpaceTrackClient, render_query_path
from .schema import GeneralPerturbationsPayload
from .session import SessionCache
from .translator import parse_orbital_record

__all__ = [
    "GeneralPerturbationsPayload",
    "SessionCache",
    "SpaceTrackAuthenticator",
    "SpaceTrackClient",
    "parse_orbital_record",
    "render_query_path",
]

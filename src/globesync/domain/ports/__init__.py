"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import FetchResult, OrbitalElementFetcher, SeismicEventFetcher
from .persistence import (
    OrbitalObjectRepository,
    Repository,
    SeismicEventRepository,
    StoreMaintenance,
)
from .unit_of_work import FeedRepositories, FeedUnitOfWork, RepositoryCollection, UnitOfWork

__all__ = [
    "FeedRepositories",
    "FeedUnitOfWork",
    "FetchResult",
    "OrbitalElementFetcher",
    "OrbitalObjectRepository",
    "Repository",
    "RepositoryCollection",
    "SeismicEventFetcher",
    "SeismicEventRepository",
    "StoreMaintenance",
    "UnitOfWork",
]

"""Ports for fetching external feed records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from globesync.domain.model import OrbitalElementRecord, SeismicEventRecord
    from globesync.domain.queries import OrbitalQuery, SeismicQuery


@dataclass(frozen=True, slots=True)
class FetchResult[TRecord]:
    """Batch of parsed records plus the number of feed entries that failed to parse."""

    records: tuple[TRecord, ...]
    skipped: int = 0


@runtime_checkable
class OrbitalElementFetcher(Protocol):
    async def fetch(self, query: OrbitalQuery) -> FetchResult[OrbitalElementRecord]: ...


@runtime_checkable
class SeismicEventFetcher(Protocol):
    async def fetch(self, query: SeismicQuery) -> FetchResult[SeismicEventRecord]: ...

"""HTTP client for the USGS earthquake event feed."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from globesync.adapters.http_resilience import ResilientClient
from globesync.adapters.parsing import parse_records
from globesync.domain.errors import FeedUnavailable

from .schema import FeatureCollection
from .translator import FEED_NAME, parse_seismic_record

if TYPE_CHECKING:
    from collections.abc import Callable

    from globesync.config.http_resilience import ResilienceConfig
    from globesync.config.usgs import UsgsConfig
    from globesync.domain.model import SeismicEventRecord
    from globesync.domain.ports.fetching import FetchResult
    from globesync.domain.queries import SeismicQuery

log = getLogger(__name__)


def query_params(query: SeismicQuery) -> httpx.QueryParams:
    return httpx.QueryParams(
        {
            "format": "geojson",
            "starttime": query.start.isoformat(),
            "endtime": query.end.isoformat(),
            "minmagnitude": query.min_magnitude,
        }
    )


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class UsgsClient:
    """Fetch seismic events, flattening the feature collection envelope."""

    config: UsgsConfig
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    async def fetch(self, query: SeismicQuery) -> FetchResult[SeismicEventRecord]:
        params = query_params(query)
        log.info("Fetching seismic events: %s", params)
        async with self.client_factory(self.config.resilience) as client:
            try:
                response = await client.get(self.config.query_path, params=params)
            except httpx.HTTPError as exc:
                raise FeedUnavailable(FEED_NAME, str(exc)) from exc

        if response.is_error:
            raise FeedUnavailable(
                FEED_NAME,
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        try:
            collection = FeatureCollection.model_validate_json(response.content)
        except ValidationError as exc:
            msg = "response is not a GeoJSON feature collection"
            raise FeedUnavailable(FEED_NAME, msg) from exc

        return parse_records(collection.features, parse_seismic_record)

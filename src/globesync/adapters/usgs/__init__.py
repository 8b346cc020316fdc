"""Public interface for the USGS adapter."""

from __future__ import annotations

from .client import UsgsClient, query_params
from .schema import EventFeature, FeatureCollection
from .translator import parse_seismic_record

__all__ = [
    "EventFeature",
    "FeatureCollection",
    "UsgsClient",
    "parse_seismic_record",
    "query_params",
]

"""Feed reconciliation domain: records, entities, reconcilers and passes."""

from __future__ import annotations

from .errors import (
    AuthenticationFailed,
    FeedUnavailable,
    MaintenanceFailure,
    PersistenceFailure,
    RecordParseSkipped,
    SyncError,
)
from .model import OrbitalElementRecord, OrbitalObject, SeismicEvent, SeismicEventRecord
from .queries import INTEREST_CATALOG_IDS, OrbitalQuery, SeismicQuery
from .reconciliation import (
    OrbitalReconciler,
    ReconcileOutcome,
    ReconcileResult,
    SeismicReconciler,
)
from .retention import RetentionPolicy, RetentionResult, purge_expired, run_maintenance
from .sync import RecordSync, SyncPassResult, run_sync_pass

__all__ = [
    "INTEREST_CATALOG_IDS",
    "AuthenticationFailed",
    "FeedUnavailable",
    "MaintenanceFailure",
    "OrbitalElementRecord",
    "OrbitalObject",
    "OrbitalQuery",
    "OrbitalReconciler",
    "PersistenceFailure",
    "ReconcileOutcome",
    "ReconcileResult",
    "RecordParseSkipped",
    "RecordSync",
    "RetentionPolicy",
    "RetentionResult",
    "SeismicEvent",
    "SeismicEventRecord",
    "SeismicQuery",
    "SeismicReconciler",
    "SyncError",
    "SyncPassResult",
    "purge_expired",
    "run_maintenance",
]

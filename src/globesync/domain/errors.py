"""Failure taxonomy for feed reconciliation.

Per-record failures (``RecordParseSkipped``, ``PersistenceFailure``) never abort a
sync pass. Pass-level failures (``AuthenticationFailed``, ``FeedUnavailable``,
``MaintenanceFailure``) abort only the current scheduled run.
"""

from __future__ import annotations


class SyncError(RuntimeError):
    """Base class for errors raised by the synchronisation core."""


class AuthenticationFailed(SyncError):
    """Raised when a feed rejects the login exchange."""

    def __init__(self, feed: str, *, status_code: int, body: str) -> None:
        super().__init__(f"{feed} login failed with status {status_code}: {body}")
        self.feed = feed
        self.status_code = status_code
        self.body = body


class FeedUnavailable(SyncError):
    """Raised when a feed cannot be reached or answers with a non-success status."""

    def __init__(self, feed: str, message: str, *, status_code: int | None = None) -> None:
        super().__init__(f"{feed} unavailable: {message}")
        self.feed = feed
        self.status_code = status_code


class RecordParseSkipped(SyncError):
    """Raised by translators for a feed record that cannot be parsed."""

    def __init__(self, feed: str, reason: str, *, key: object | None = None) -> None:
        label = f" {key}" if key is not None else ""
        super().__init__(f"Skipped {feed} record{label}: {reason}")
        self.feed = feed
        self.reason = reason
        self.key = key


class PersistenceFailure(SyncError):
    """Raised when a store operation fails while reconciling one record."""

    def __init__(self, key: object, message: str) -> None:
        super().__init__(f"Persisting record {key} failed: {message}")
        self.key = key


class MaintenanceFailure(SyncError):
    """Raised when a storage maintenance operation fails."""

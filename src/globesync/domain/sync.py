"""Reconciliation passes: fetch one batch from a feed and reconcile every record."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from .errors import PersistenceFailure, SyncError
from .reconciliation import ReconcileOutcome, ReconcileResult

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from .model import ExternalRecord, PersistedEntity
    from .ports.fetching import FetchResult
    from .ports.unit_of_work import FeedRepositories, FeedUnitOfWork

log = getLogger(__name__)

DEFAULT_CONCURRENCY = 8
DEFAULT_RECORD_TIMEOUT_SECONDS = 30.0


class _Reconciler[TRecord: ExternalRecord, TRepository, TEntity: PersistedEntity](Protocol):
    def reconcile(self, record: TRecord, repository: TRepository) -> ReconcileResult[TEntity]: ...


@dataclass(slots=True)
class SyncPassResult:
    """Outcome counts of one reconciliation pass."""

    family: str
    fetched: int = 0
    skipped: int = 0
    inserted: int = 0
    updated: int = 0
    unchanged: int = 0
    failed: int = 0
    duration_seconds: float = 0.0
    failures: list[str] = field(default_factory=list[str])

    @property
    def reconciled(self) -> int:
        return self.inserted + self.updated + self.unchanged

    def tally(self, outcome: ReconcileOutcome) -> None:
        match outcome:
            case ReconcileOutcome.INSERTED:
                self.inserted += 1
            case ReconcileOutcome.UPDATED:
                self.updated += 1
            case ReconcileOutcome.NOOP:
                self.unchanged += 1


@dataclass(slots=True)
class RecordSync[TRecord: ExternalRecord, TRepository, TEntity: PersistedEntity]:
    """Reconcile one record inside its own unit of work.

    Every store error is reported as ``PersistenceFailure`` for that record only.
    The unit of work is committed only when the reconciler wrote something, and
    never once ``timeout`` seconds have passed since the record was picked up.
    """

    reconciler: _Reconciler[TRecord, TRepository, TEntity]
    repository: Callable[[FeedRepositories], TRepository]
    unit_of_work_factory: Callable[[], FeedUnitOfWork]
    timeout: float | None = None

    def __call__(self, record: TRecord) -> ReconcileResult[TEntity]:
        started = time.monotonic()
        try:
            with self.unit_of_work_factory() as uow:
                result = self.reconciler.reconcile(record, self.repository(uow.repositories))
                if result.wrote:
                    # the awaiting pass has already counted this record as failed
                    if self.timeout is not None and time.monotonic() - started > self.timeout:
                        raise PersistenceFailure(record.key, "timed out before commit")
                    uow.commit()
                return result
        except PersistenceFailure:
            raise
        except Exception as exc:
            raise PersistenceFailure(record.key, str(exc)) from exc


async def run_sync_pass[TRecord: ExternalRecord](
    *,
    family: str,
    fetch: Callable[[], Awaitable[FetchResult[TRecord]]],
    reconcile_one: Callable[[TRecord], ReconcileResult[PersistedEntity]],
    concurrency: int = DEFAULT_CONCURRENCY,
    record_timeout: float | None = DEFAULT_RECORD_TIMEOUT_SECONDS,
    fetch_timeout: float | None = None,
    on_result: Callable[[SyncPassResult], None] | None = None,
    on_error: Callable[[BaseException], None] | None = None,
) -> SyncPassResult:
    """Fetch one batch and reconcile every record with bounded fan-out.

    Records are reconciled concurrently, at most ``concurrency`` at a time, each
    in a worker thread so blocking store calls never stall the event loop. A
    failed or timed-out record is counted and logged; the rest of the batch
    carries on. A timed-out record keeps its slot until its thread returns.
    Fetch failures abort the pass and are re-raised after ``on_error`` has been
    notified.
    """

    if concurrency < 1:
        raise ValueError("concurrency must be at least 1")

    started = time.monotonic()
    result = SyncPassResult(family=family)
    log.info("Starting %s reconciliation pass", family)

    try:
        async with asyncio.timeout(fetch_timeout):
            batch = await fetch()
    except (SyncError, TimeoutError) as exc:
        log.error("%s pass aborted while fetching: %s", family, exc)  # noqa: TRY400
        if on_error is not None:
            on_error(exc)
        raise

    result.fetched = len(batch.records)
    result.skipped = batch.skipped
    if batch.skipped:
        log.warning("%s feed: skipped %s unparseable records", family, batch.skipped)

    semaphore = asyncio.Semaphore(concurrency)

    async def reconcile_record(record: TRecord) -> None:
        async with semaphore:
            work = asyncio.ensure_future(asyncio.to_thread(reconcile_one, record))
            try:
                async with asyncio.timeout(record_timeout):
                    outcome = await asyncio.shield(work)
            except TimeoutError:
                log.error(  # noqa: TRY400
                    "%s record %s timed out after %ss", family, record.key, record_timeout
                )
                result.failed += 1
                result.failures.append(f"{record.key}: timed out")
                # the worker thread cannot be interrupted; keep its slot until it exits
                await _wait_for_abandoned(work, family=family, key=record.key)
                return
            except PersistenceFailure as exc:
                log.error("%s record %s failed: %s", family, record.key, exc)  # noqa: TRY400
                result.failed += 1
                result.failures.append(str(exc))
                return
            except Exception as exc:
                log.exception("%s record %s failed unexpectedly", family, record.key)
                result.failed += 1
                result.failures.append(f"{record.key}: {exc}")
                return
        result.tally(outcome.outcome)
        if outcome.wrote:
            log.info("%s %s: %s", family, record.key, outcome.outcome.value)
        else:
            log.debug("%s %s: %s", family, record.key, outcome.outcome.value)

    async with asyncio.TaskGroup() as group:
        for record in batch.records:
            group.create_task(reconcile_record(record))

    result.duration_seconds = time.monotonic() - started
    log.info(
        "Finished %s pass: fetched=%s, inserted=%s, updated=%s, unchanged=%s, "
        "failed=%s, skipped=%s in %.1fs",
        family,
        result.fetched,
        result.inserted,
        result.updated,
        result.unchanged,
        result.failed,
        result.skipped,
        result.duration_seconds,
    )
    if on_result is not None:
        on_result(result)
    return result


async def _wait_for_abandoned(
    work: asyncio.Future[ReconcileResult[PersistedEntity]], *, family: str, key: object
) -> None:
    try:
        late = await work
    except Exception as exc:  # noqa: BLE001
        log.debug("%s record %s finished after its timeout: %s", family, key, exc)
    else:
        log.warning(
            "%s record %s finished after its timeout as %s", family, key, late.outcome.value
        )

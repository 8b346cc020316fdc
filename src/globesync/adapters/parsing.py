"""Shared helpers for turning raw feed payloads into record batches."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from globesync.domain.errors import RecordParseSkipped
from globesync.domain.ports.fetching import FetchResult

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

log = getLogger(__name__)


def parse_records[TRecord](
    payloads: Iterable[object],
    parser: Callable[[object], TRecord],
) -> FetchResult[TRecord]:
    """Parse every payload, dropping and counting the ones the parser rejects."""

    records: list[TRecord] = []
    skipped = 0
    for payload in payloads:
        try:
            records.append(parser(payload))
        except RecordParseSkipped as exc:
            skipped += 1
            log.warning("%s", exc)
    return FetchResult(records=tuple(records), skipped=skipped)

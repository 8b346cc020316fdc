from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from globesync.app import (
    get_orbital_object,
    list_interest_objects,
    list_recent_seismic_events,
    populate_orbital_objects,
    purge_expired_entities,
    run_store_maintenance,
    search_orbital_objects,
    sync_orbital_objects,
    sync_seismic_events,
)
from globesync.config import configure_logging
from globesync.domain.queries import CONSTELLATION_PREFIXES, OrbitalQuery, SeismicQuery
from globesync.scheduler import build_sync_scheduler

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from globesync.domain.model import OrbitalObject, SeismicEvent
    from globesync.domain.sync import SyncPassResult

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Keep the orbital and seismic store in sync")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("serve", help="Run the recurring sync, retention and maintenance jobs")

    sync = subparsers.add_parser("sync", help="Run a single reconciliation pass")
    sync_sub = sync.add_subparsers(dest="family", required=True)

    orbital = sync_sub.add_parser("orbital", help="Sync orbital element sets")
    selection = orbital.add_mutually_exclusive_group()
    selection.add_argument(
        "--interest",
        action="store_true",
        help="Only the fixed set of notable objects",
    )
    selection.add_argument("--name", type=str, help="Objects whose name contains this text")
    selection.add_argument("--catalog-id", type=int, help="A single catalog number")
    selection.add_argument(
        "--constellation",
        choices=sorted(CONSTELLATION_PREFIXES),
        help="All objects of a named constellation",
    )

    seismic = sync_sub.add_parser("seismic", help="Sync seismic events")
    seismic.add_argument(
        "--days",
        type=int,
        default=1,
        help="Number of days to look back (default: %(default)s)",
    )
    seismic.add_argument(
        "--min-magnitude",
        type=float,
        default=2.5,
        help="Minimum magnitude to request (default: %(default)s)",
    )

    subparsers.add_parser("populate", help="Re-populate all active orbital objects")
    subparsers.add_parser("purge", help="Delete entities older than the retention window")
    subparsers.add_parser("maintain", help="Run storage maintenance (vacuum/analyze)")

    show = subparsers.add_parser("show", help="Print stored entities")
    show_sub = show.add_subparsers(dest="view", required=True)
    show_sub.add_parser("interest", help="Notable orbital objects")
    show_search = show_sub.add_parser("search", help="Orbital objects by name")
    show_search.add_argument("name", type=str)
    show_object = show_sub.add_parser("object", help="One orbital object by catalog number")
    show_object.add_argument("catalog_id", type=int)
    show_recent = show_sub.add_parser("recent", help="Recent seismic events")
    show_recent.add_argument("--days", type=int, default=1)

    return parser.parse_args(list(argv))


def _orbital_query(args: argparse.Namespace) -> OrbitalQuery:
    if args.interest:
        return OrbitalQuery.interest_set()
    if args.name is not None:
        return OrbitalQuery.by_name(args.name)
    if args.catalog_id is not None:
        return OrbitalQuery.by_catalog_id(args.catalog_id)
    if args.constellation is not None:
        return OrbitalQuery.constellation(args.constellation)
    return OrbitalQuery.all_active()


def _seismic_query(args: argparse.Namespace) -> SeismicQuery:
    if args.days < 1:
        raise ValueError("--days must be at least 1")
    return SeismicQuery.recent(days=args.days, min_magnitude=args.min_magnitude)


def _format_orbital(entity: OrbitalObject) -> str:
    return f"{entity.catalog_id:>6}  {entity.object_name:<24}  epoch={entity.epoch.isoformat()}"


def _format_seismic(entity: SeismicEvent) -> str:
    magnitude = "?" if entity.magnitude is None else f"{entity.magnitude:.1f}"
    place = entity.place or ""
    return f"{entity.event_time.isoformat()}  M{magnitude:<4}  {entity.event_id}  {place}"


def _log_pass(result: SyncPassResult) -> None:
    if result.failed:
        log.warning("%s pass finished with %s failed records", result.family, result.failed)


async def _serve() -> None:
    sync_scheduler = build_sync_scheduler()
    sync_scheduler.start()
    log.info("Scheduler running jobs: %s", ", ".join(sync_scheduler.job_names()))
    try:
        await asyncio.Event().wait()
    finally:
        sync_scheduler.shutdown()


def _show(args: argparse.Namespace) -> None:
    if args.view == "interest":
        lines = [_format_orbital(entity) for entity in list_interest_objects()]
    elif args.view == "search":
        lines = [_format_orbital(entity) for entity in search_orbital_objects(args.name)]
    elif args.view == "object":
        entity = get_orbital_object(args.catalog_id)
        if entity is None:
            raise LookupError(f"No stored orbital object {args.catalog_id}")
        lines = [_format_orbital(entity), entity.tle_line1, entity.tle_line2]
    else:
        lines = [_format_seismic(entity) for entity in list_recent_seismic_events(args.days)]
    sys.stdout.write("".join(f"{line}\n" for line in lines))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        orbital_query = seismic_query = None
        if parsed_args.command == "sync" and parsed_args.family == "orbital":
            orbital_query = _orbital_query(parsed_args)
        elif parsed_args.command == "sync":
            seismic_query = _seismic_query(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "serve":
            asyncio.run(_serve())
        elif parsed_args.command == "sync" and orbital_query is not None:
            asyncio.run(sync_orbital_objects(query=orbital_query, on_result=_log_pass))
        elif parsed_args.command == "sync" and seismic_query is not None:
            asyncio.run(sync_seismic_events(query=seismic_query, on_result=_log_pass))
        elif parsed_args.command == "populate":
            asyncio.run(populate_orbital_objects())
        elif parsed_args.command == "purge":
            result = purge_expired_entities()
            log.info("Purged %s entities", result.total)
        elif parsed_args.command == "maintain":
            run_store_maintenance()
        elif parsed_args.command == "show":
            _show(parsed_args)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()

from __future__ import annotations

import argparse
import logging
import sys
from datetime import UTC, datetime
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from fairway.app import create_tournament, sync_datagolf_live
from fairway.config import configure_logging
from fairway.domain.live_sync import LiveSyncSkipped

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fantasy golf live data sync")
    subparsers = parser.add_subparsers(dest="command", required=True)

    live = subparsers.add_parser("live-sync", help="Sync DataGolf live data into a tournament")
    live.add_argument(
        "--tournament-id",
        type=str,
        help="Tournament to sync (defaults to the active tournament)",
    )
    live.add_argument(
        "--tour",
        type=str,
        help="DataGolf tour code, e.g. pga (defaults to DATAGOLF_TOUR or pga)",
    )
    live.add_argument(
        "--skip-event-check",
        action="store_true",
        help="Sync even if the DataGolf event name does not match the tournament",
    )

    tournament = subparsers.add_parser("tournament", help="Tournament management commands")
    tournament_sub = tournament.add_subparsers(dest="tournament_command", required=True)
    tournament_create = tournament_sub.add_parser("create", help="Create a tournament")
    tournament_create.add_argument("--name", type=str, required=True, help="Tournament name")
    tournament_create.add_argument(
        "--start",
        type=str,
        required=True,
        help="ISO-8601 timestamp (UTC) of the first tee time",
    )
    tournament_create.add_argument(
        "--end",
        type=str,
        help="ISO-8601 timestamp (UTC) of the last day",
    )

    return parser.parse_args(list(argv))


def _parse_iso_datetime(value: str) -> datetime:
    try:
        normalized = value.strip()
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        dt = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise ValueError(f"Invalid ISO timestamp: {value}") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    tournament_id: UUID | None = None
    start: datetime | None = None
    end: datetime | None = None
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.command == "live-sync" and parsed_args.tournament_id:
            tournament_id = _parse_uuid(parsed_args.tournament_id)
        elif parsed_args.command == "tournament":
            start = _parse_iso_datetime(parsed_args.start)
            end = _parse_iso_datetime(parsed_args.end) if parsed_args.end else None
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "live-sync":
            result = sync_datagolf_live(
                tournament_id=tournament_id,
                tour=parsed_args.tour,
                check_event_name=False if parsed_args.skip_event_check else None,
            )
            if isinstance(result, LiveSyncSkipped):
                log.warning("Live sync skipped: %s", result.reason)
        elif parsed_args.command == "tournament" and parsed_args.tournament_command == "create":
            if start is None:
                raise ValueError("Missing --start")  # noqa: TRY301
            tournament = create_tournament(name=parsed_args.name, start_date=start, end_date=end)
            log.info("Created tournament %s (%s)", tournament.id, tournament.name)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from roomsync.app import compare_directories, create_missing_room_lists, start_migration_batch
from roomsync.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--snapshot-dir",
        type=Path,
        help="Directory holding the on-prem CSV exports (defaults to ROOMSYNC_SNAPSHOT_DIR or cwd)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Directory for reports and logs (defaults to the data directory)",
    )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compare rooms and room lists between an on-prem snapshot and the cloud"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    compare = subparsers.add_parser("compare", help="Write the comparison report")
    _add_common_arguments(compare)

    create = subparsers.add_parser(
        "create-room-lists",
        help="Create room lists missing from the cloud and replay their members",
    )
    _add_common_arguments(create)
    create.add_argument(
        "--dry-run",
        action="store_true",
        help="Only report what would be created",
    )

    batch = subparsers.add_parser(
        "migration-batch",
        help="Export not-migrated rooms as a migration batch CSV",
    )
    _add_common_arguments(batch)
    batch.add_argument("--name", type=str, help="Migration batch name")
    batch.add_argument(
        "--submit",
        action="store_true",
        help="Submit the batch to the cloud migration service after writing the CSV",
    )
    batch.add_argument("--source-endpoint", type=str, help="Migration endpoint name")
    batch.add_argument(
        "--target-delivery-domain",
        type=str,
        help="Target delivery domain for migrated mailboxes",
    )

    return parser.parse_args(list(argv))


def _validate(args: argparse.Namespace) -> None:
    snapshot_dir: Path | None = args.snapshot_dir
    if snapshot_dir is not None and not snapshot_dir.is_dir():
        raise ValueError(f"Snapshot directory does not exist: {snapshot_dir}")
    if args.command == "migration-batch" and args.name is not None and not args.name.strip():
        raise ValueError("Migration batch name must not be blank")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        _validate(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    if parsed_args.verbose:
        configure_logging(level=logging.DEBUG, force=True)

    try:
        if parsed_args.command == "compare":
            run = compare_directories(
                snapshot_dir=parsed_args.snapshot_dir,
                output_dir=parsed_args.output_dir,
            )
            if run.report is not None:
                log.info("Report written to %s", run.report.html)
        elif parsed_args.command == "create-room-lists":
            report = create_missing_room_lists(
                snapshot_dir=parsed_args.snapshot_dir,
                output_dir=parsed_args.output_dir,
                dry_run=parsed_args.dry_run,
            )
            log.info(
                "Room list creation finished: lists=%s, members=%s",
                dict(report.list_outcomes),
                dict(report.member_outcomes),
            )
        elif parsed_args.command == "migration-batch":
            batch = start_migration_batch(
                name=parsed_args.name,
                submit=parsed_args.submit,
                source_endpoint=parsed_args.source_endpoint,
                target_delivery_domain=parsed_args.target_delivery_domain,
                snapshot_dir=parsed_args.snapshot_dir,
                output_dir=parsed_args.output_dir,
            )
            log.info(
                "Migration batch %s holds %s rooms", batch.request.name, len(batch.request.rooms)
            )
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during room comparison")
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

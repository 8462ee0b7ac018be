#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Main CLI entry point for the photo frame engine.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from .config import (
    DEFAULT_HISTORY_COOLDOWN, DEFAULT_MISSING_GRACE_SECONDS, DEFAULT_RECONCILE_AT, DATA_DIR_ENV,
    StorageRootError, StoragePaths,
)
from .commands.registry import cmd_list_alive, cmd_show_photo, cmd_tombstone
from .commands.reconcile import cmd_reconcile
from .commands.scheduler import cmd_show_status
from .commands.ingest import cmd_ingest
from .commands.publish import cmd_publish
from .commands.services import install_stop_handlers, run_scheduler, run_reconciler, run_processor
from .events.types import RemovedPhoto, RequestCurrent, RequestNext, SetQuietHours, SetShuffle
from .jsonio import enable_json_logging, error
from .scheduling.quiet_hours import parse_hhmm

LOG_FORMAT = "%(asctime)s [%(name)s] [%(levelname)s] %(message)s"


def setup_logging(verbose: bool):
    """Configure logging for the CLI; LOG_LEVEL in the environment wins over --verbose."""
    level = logging.DEBUG if verbose else logging.INFO
    env_level = logging.getLevelName(os.environ.get("LOG_LEVEL", "").upper())
    if isinstance(env_level, int):
        level = env_level
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    logging.debug("Logging configured at %s.", logging.getLevelName(level))


def _hhmm_arg(value: str):
    """argparse type for HH:MM, returned as (hour, minute)."""
    try:
        minutes = parse_hhmm(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))
    return divmod(minutes, 60)


def create_parser():
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description="Photo frame engine - registry, reconciler and display scheduler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""Examples:
  # Import a folder of pictures and look at the registry
  %(prog)s ingest ~/Pictures/frame --username alice
  %(prog)s alive --json

  # Run the services (each in its own process)
  %(prog)s run-processor
  %(prog)s run-scheduler --cooldown 5
  %(prog)s run-reconciler --at 03:30

  # Talk to a running scheduler
  %(prog)s publish set-shuffle --minutes 10 --chat-id 42
  %(prog)s publish request-next --chat-id 42 --requested-by alice

The data root defaults to ./.photo-frame-data and can be set with
--data-dir or the {DATA_DIR_ENV} environment variable.
        """
    )

    # Global options
    parser.add_argument("--data-dir",
                        help=f"Data root (default: ${DATA_DIR_ENV} or ./.photo-frame-data)")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable verbose (DEBUG) output")
    parser.add_argument("--json", action="store_true",
                        help="Output results as JSON instead of human-readable text")

    # Lets `--json` also follow the subcommand without resetting the global flag
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--json", action="store_true", default=argparse.SUPPRESS,
                        help="Output as JSON")

    subparsers = parser.add_subparsers(dest="command", required=True, help="Available commands")

    _add_registry_parsers(subparsers, common)
    _add_maintenance_parsers(subparsers, common)
    _add_publish_parser(subparsers, common)
    _add_service_parsers(subparsers)

    return parser


def _add_registry_parsers(subparsers, common):
    """Add registry inspection parsers."""
    subparsers.add_parser("alive", parents=[common], help="List photos alive in the registry")

    show_parser = subparsers.add_parser("show", parents=[common], help="Show a photo's record history")
    show_parser.add_argument("--photo-id", required=True, help="Logical photo id (file stem)")

    tomb_parser = subparsers.add_parser("tombstone", parents=[common],
                                        help="Append a tombstone for a photo")
    tomb_parser.add_argument("--photo-id", required=True, help="Logical photo id (file stem)")

    subparsers.add_parser("status", parents=[common], help="Show scheduler config, state and gate")


def _add_maintenance_parsers(subparsers, common):
    """Add reconcile and ingest parsers."""
    rec_parser = subparsers.add_parser("reconcile", parents=[common],
                                       help="Bring the registry in line with the photo store")
    rec_parser.add_argument("--grace-seconds", type=float, default=DEFAULT_MISSING_GRACE_SECONDS,
                            help="Only tombstone/add files missing or new for this long (default: 0)")

    ingest_parser = subparsers.add_parser("ingest", parents=[common],
                                          help="Render and register local images")
    ingest_parser.add_argument("paths", nargs="+", help="Image files or directories")
    ingest_parser.add_argument("--username", default="", help="Submitter name to record")


def _add_publish_parser(subparsers, common):
    """Add the publish parser and its event subcommands."""
    pub_parser = subparsers.add_parser("publish", parents=[common], help="Publish a control event")
    events = pub_parser.add_subparsers(dest="event", required=True, help="Event to publish")

    nxt = events.add_parser("request-next", parents=[common], help="Ask for a manual rotation")
    nxt.add_argument("--chat-id", type=int, default=0, help="Chat to reply to")
    nxt.add_argument("--requested-by", help="Requesting user")

    cur = events.add_parser("request-current", parents=[common], help="Ask which photo is shown")
    cur.add_argument("--chat-id", type=int, default=0, help="Chat to reply to")

    shuffle = events.add_parser("set-shuffle", parents=[common], help="Change the rotation interval")
    shuffle.add_argument("--minutes", type=float, required=True, help="Rotation interval in minutes")
    shuffle.add_argument("--chat-id", type=int, help="Chat to reply to")
    shuffle.add_argument("--requested-by", help="Requesting user")

    quiet = events.add_parser("set-quiet-hours", parents=[common], help="Change the quiet-hours window")
    quiet.add_argument("--start", required=True, help="Window start, HH:MM local time")
    quiet.add_argument("--end", required=True, help="Window end, HH:MM local time")
    quiet.add_argument("--disable", action="store_true", help="Store the window but keep it disabled")
    quiet.add_argument("--chat-id", type=int, help="Chat to reply to")
    quiet.add_argument("--requested-by", help="Requesting user")

    remove = events.add_parser("remove-photo", parents=[common], help="Delete a photo and tombstone it")
    remove.add_argument("--photo-id", required=True, help="Logical photo id (file stem)")


def _add_service_parsers(subparsers):
    """Add long-running service parsers."""
    sched = subparsers.add_parser("run-scheduler", help="Run the display scheduler")
    sched.add_argument("--cooldown", type=int, default=DEFAULT_HISTORY_COOLDOWN,
                       help=f"Recent picks to avoid repeating (default: {DEFAULT_HISTORY_COOLDOWN})")

    rec = subparsers.add_parser("run-reconciler", help="Reconcile at boot and then daily")
    rec.add_argument("--at", type=_hhmm_arg, default=DEFAULT_RECONCILE_AT,
                     help="Daily run time, HH:MM local time (default: %02d:%02d)" % DEFAULT_RECONCILE_AT)
    rec.add_argument("--grace-seconds", type=float, default=DEFAULT_MISSING_GRACE_SECONDS,
                     help="Only tombstone/add files missing or new for this long (default: 0)")

    subparsers.add_parser("run-processor", help="Run the ingestion processor")


def build_event(args):
    """Turn `publish` arguments into a bus event."""
    if args.event == "request-next":
        return RequestNext(chat_id=args.chat_id, requested_by=args.requested_by)
    if args.event == "request-current":
        return RequestCurrent(chat_id=args.chat_id)
    if args.event == "set-shuffle":
        return SetShuffle(minutes=args.minutes, requested_by=args.requested_by, chat_id=args.chat_id)
    if args.event == "set-quiet-hours":
        parse_hhmm(args.start)
        parse_hhmm(args.end)
        return SetQuietHours(enabled=not args.disable, start=args.start, end=args.end,
                             requested_by=args.requested_by, chat_id=args.chat_id)
    if args.event == "remove-photo":
        return RemovedPhoto(photo_id=args.photo_id)
    raise ValueError(f"Unknown event: {args.event}")


def main(argv=None):
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    as_json = getattr(args, 'json', False)

    # Setup logging based on --verbose (but suppress if JSON output requested)
    if as_json:
        enable_json_logging()
    else:
        setup_logging(args.verbose)

    logging.debug("Parsed arguments: %s", args)

    try:
        paths = StoragePaths.resolve(args.data_dir).ensure()
    except StorageRootError as e:
        if as_json:
            return error(args.command, str(e), code=1)
        logging.error("%s", e)
        return 1
    logging.debug("Using data root: %s", paths.root)

    try:
        if args.command == "alive":
            return cmd_list_alive(paths, as_json)

        elif args.command == "show":
            return cmd_show_photo(paths, args.photo_id, as_json)

        elif args.command == "tombstone":
            logging.info("Tombstoning %s", args.photo_id)
            return cmd_tombstone(paths, args.photo_id, as_json)

        elif args.command == "status":
            return cmd_show_status(paths, as_json)

        elif args.command == "reconcile":
            logging.info("Reconciling registry with %s", paths.photos_dir)
            return cmd_reconcile(paths, args.grace_seconds, as_json)

        elif args.command == "ingest":
            logging.info("Ingesting %d path(s)", len(args.paths))
            return cmd_ingest(paths, [Path(p) for p in args.paths], args.username, as_json)

        elif args.command == "publish":
            return cmd_publish(paths, build_event(args), as_json)

        elif args.command == "run-scheduler":
            return run_scheduler(paths, install_stop_handlers(), cooldown=args.cooldown)

        elif args.command == "run-reconciler":
            return run_reconciler(paths, install_stop_handlers(), run_at=args.at,
                                  grace_seconds=args.grace_seconds)

        elif args.command == "run-processor":
            return run_processor(paths, install_stop_handlers())

    except KeyboardInterrupt:
        if as_json:
            return error(args.command, "Operation interrupted by user", code=130)
        logging.warning("Operation interrupted by user.")
        return 130
    except Exception as e:
        if as_json:
            debug_info = {"exception_type": type(e).__name__} if args.verbose else None
            return error(args.command, str(e), debug=debug_info, code=1)
        logging.error("Error occurred: %s", e, exc_info=args.verbose)
        return 1


if __name__ == "__main__":
    sys.exit(main())

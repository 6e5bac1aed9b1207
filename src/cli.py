#!/usr/bin/env python3
"""
CLI for mirroring the directory structure of two roots.

Usage:
    python -m src.cli sync --left /path/to/scripts --right /path/to/data
    python -m src.cli check --left /path/to/scripts --right /path/to/data --json
    python -m src.cli watch --left /path/to/scripts --right /path/to/data
    python -m src.cli ensure-path analysis/2024 --left ... --right ...
"""

import argparse
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import List, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from src.treesync import (
    ConfigError,
    ExitCode,
    InvalidPathError,
    ReconciliationEngine,
    RootOverlapError,
    RootUnavailableError,
    SyncConfig,
    WatchEngine,
    WatchSubscriptionError,
    RootPair,
    __version__,
)
from src.treesync.config import LOG_LEVELS
from src.treesync.output import render_check, render_ensure, render_sync

logger = logging.getLogger("cli")


def setup_logging(level: str) -> None:
    """Configure root logging for the CLI."""
    name = level.lower()
    if name == "warn":
        name = "warning"
    if name not in LOG_LEVELS:
        print(f"Invalid log level: {level}. Using 'info' instead.", file=sys.stderr)
        name = "info"

    logging.basicConfig(
        level=getattr(logging, name.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


class GracefulShutdown:
    """Set a cancellation event on SIGINT/SIGTERM."""

    def __init__(self, cancel: threading.Event):
        self.cancel = cancel
        signal.signal(signal.SIGINT, self._handler)
        signal.signal(signal.SIGTERM, self._handler)

    def _handler(self, signum, frame):
        logger.info("Received shutdown signal, stopping...")
        self.cancel.set()


def build_config(args) -> SyncConfig:
    """Merge environment settings with command-line flags."""
    return SyncConfig.from_env(
        left_root=Path(args.left) if args.left else None,
        right_root=Path(args.right) if args.right else None,
        exclude_patterns=args.exclude or None,
        max_workers=args.workers,
        log_level=args.log_level,
        gitkeep=args.gitkeep or None,
        dry_run=args.dry_run or None,
        json_output=args.json or None,
    )


def require_roots(config: SyncConfig) -> bool:
    if config.left_root is None:
        logger.error("--left is required for this command (or set TREESYNC_LEFT)")
        return False
    if config.right_root is None:
        logger.error("--right is required for this command (or set TREESYNC_RIGHT)")
        return False
    return True


def cmd_sync(config: SyncConfig, args) -> int:
    """One-shot sync: create missing directories on both sides."""
    logger.info("Running sync command")
    engine = ReconciliationEngine(config.retry_policy(), config.max_workers)
    outcome = engine.sync(
        config.left_root,
        config.right_root,
        config.build_filter(),
        dry_run=config.dry_run,
        gitkeep=config.gitkeep,
    )
    print(render_sync(outcome, config.json_output))
    return ExitCode.SUCCESS if outcome.ok else ExitCode.FILESYSTEM_ERROR


def cmd_check(config: SyncConfig, args) -> int:
    """Report missing directories on each side."""
    logger.info("Running check command")
    engine = ReconciliationEngine(config.retry_policy(), config.max_workers)
    diff = engine.check(config.left_root, config.right_root, config.build_filter())
    print(render_check(diff, config.json_output))
    return ExitCode.SUCCESS


def cmd_ensure_path(config: SyncConfig, args) -> int:
    """Create one relative path on both roots."""
    logger.info(f"Running ensure-path command for {args.path}")
    engine = ReconciliationEngine(config.retry_policy(), config.max_workers)
    outcome = engine.ensure_single_path(config.left_root, config.right_root, args.path)
    print(render_ensure(outcome, config.json_output))
    return ExitCode.SUCCESS if outcome.ok else ExitCode.FILESYSTEM_ERROR


def cmd_watch(config: SyncConfig, args) -> int:
    """Watch mode: mirror new directory creations in real time."""
    logger.info("Running watch command")
    cancel = threading.Event()
    GracefulShutdown(cancel)

    engine = WatchEngine(
        RootPair(config.left_root, config.right_root),
        exclusion_filter=config.build_filter(),
        dry_run=config.dry_run,
        policy=config.retry_policy(),
        poll_timeout=config.poll_timeout_ms / 1000.0,
        suppression_capacity=config.suppression_capacity,
        queue_size=config.event_queue_size,
        log=logging.getLogger("treesync.watch"),
    )
    engine.watch(cancel)
    return ExitCode.SUCCESS


COMMANDS = {
    "sync": cmd_sync,
    "check": cmd_check,
    "ensure-path": cmd_ensure_path,
    "watch": cmd_watch,
}


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--left", help="Left root (e.g. the Git-tracked scripts sandbox)")
    common.add_argument("--right", help="Right root (e.g. the cloud-synced data sandbox)")
    common.add_argument("--exclude", action="append", default=[], help="Exclude pattern (glob syntax, repeatable)")
    common.add_argument("--dry-run", action="store_true", help="Show what would be done without making changes")
    common.add_argument("--gitkeep", action="store_true", help="Create .gitkeep files in empty left-side directories")
    common.add_argument("--json", action="store_true", help="Print results as JSON")
    common.add_argument("--workers", type=int, default=None, help="Directory creation worker threads (default: 4)")
    common.add_argument("--log-level", default=None, help="Log level (debug, info, warn, error)")

    parser = argparse.ArgumentParser(
        prog="treesync",
        description="Keep the directory structure of two folder trees mirrored",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("sync", parents=[common], help="Create missing directories on both sides")
    subparsers.add_parser("check", parents=[common], help="Report missing directories on each side")
    subparsers.add_parser("watch", parents=[common], help="Mirror new directory creations in real time")
    ensure = subparsers.add_parser("ensure-path", parents=[common], help="Create one relative path on both sides")
    ensure.add_argument("path", help="Path relative to both roots")
    subparsers.add_parser("version", help="Show version information")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, run the command and return the exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "version":
        print(f"treesync {__version__}")
        print("Fast directory structure synchronization between two folder trees")
        return ExitCode.SUCCESS

    load_dotenv()

    try:
        config = build_config(args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return ExitCode.INVALID_ARGUMENTS

    setup_logging(config.log_level)

    if not require_roots(config):
        return ExitCode.INVALID_ARGUMENTS

    try:
        return int(COMMANDS[args.command](config, args))
    except (InvalidPathError, RootOverlapError) as e:
        logger.error(f"Error: {e}")
        return ExitCode.INVALID_ARGUMENTS
    except (RootUnavailableError, WatchSubscriptionError) as e:
        logger.error(f"Error: {e}")
        return ExitCode.ROOT_UNAVAILABLE
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return ExitCode.UNEXPECTED_ERROR


if __name__ == "__main__":
    sys.exit(main())

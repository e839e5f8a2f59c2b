"""Application entrypoint for mp3sync."""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from rich.console import Console

from mp3sync.config.settings import DEFAULT_CONFIG_FILE, ConfigError, load_settings
from mp3sync.core.logger import LogLevel, configure_logging
from mp3sync.core.models import AbortedByUser, SyncError
from mp3sync.core.runner import SyncRunner
from mp3sync.ui.console import ConsolePresenter

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_FILE_ERRORS = 2
EXIT_ABORTED = 3


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="mp3sync",
        description="Sync an audio library into a destination tree named after the tags.",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=DEFAULT_CONFIG_FILE,
        help=f"path to the JSON config file (default: {DEFAULT_CONFIG_FILE})",
    )
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="answer yes to every question",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="show what would be synced without copying anything",
    )
    parser.add_argument(
        "--log-dir",
        help="directory for error logs (overrides the config file)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="log progress details (-vv for debug output)",
    )
    return parser


def _log_level(verbosity: int) -> LogLevel:
    if verbosity >= 2:
        return LogLevel.DEBUG
    if verbosity == 1:
        return LogLevel.INFO
    return LogLevel.WARNING


def main(argv: Sequence[str] | None = None, console: Console | None = None) -> int:
    """Main application entrypoint.

    Args:
        argv: Command line arguments without the program name.
        console: Console to render on. A new one is created if None.

    Returns:
        Process exit code.
    """
    args = build_parser().parse_args(argv)
    configure_logging(_log_level(args.verbose))
    presenter = ConsolePresenter(console)

    presenter.title("MP3 sync started ...")
    presenter.console.print()

    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        presenter.error(f"failed to load config: {e}")
        return EXIT_FAILED

    if args.log_dir:
        settings.log_dir = args.log_dir

    presenter.description("Source", settings.source)
    presenter.description("Destination", settings.destination)
    presenter.console.print()

    prompter = (lambda question: "y") if args.yes else presenter.ask
    runner = SyncRunner(settings, prompter=prompter, on_event=presenter.handle_event)

    try:
        result = runner.run(dry_run=args.dry_run)
    except AbortedByUser as e:
        presenter.console.print()
        presenter.error(f"MP3 sync {e}")
        return EXIT_ABORTED
    except SyncError as e:
        presenter.console.print()
        presenter.error(f"MP3 sync finished with error: {e}")
        return EXIT_FAILED
    finally:
        presenter.close()

    presenter.console.print()
    if result.has_errors:
        presenter.error(
            f"MP3 sync finished with {len(result.errors)} errors, "
            f"see log for more details: {result.log_file}"
        )
        return EXIT_FILE_ERRORS

    if result.dry_run:
        presenter.title(f"Dry run finished, {result.planned_files} files would be synced")
    else:
        presenter.title("MP3 sync finished successful!")
    return EXIT_OK


def run() -> None:
    """Console script entrypoint."""
    sys.exit(main())


if __name__ == "__main__":
    run()

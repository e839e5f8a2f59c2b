"""Logging module for mp3sync.

This module provides:
- Logging setup with timestamps and levels (console and optional file)
- File status tracking (COPIED, SKIPPED, FILTERED, FAILED)
- The plain-text error log written at the end of a run
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Iterable

from mp3sync.core.models import LogWriteError

# Format for log timestamps
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Log message format
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

# Error log file names sort by creation time
ERROR_LOG_NAME_FORMAT = "%Y%m%d-%H%M%S"

DEFAULT_LOG_DIR = "logs"

ROOT_LOGGER_NAME = "mp3sync"


class FileStatus(Enum):
    """Status of a file during a sync run."""

    COPIED = "COPIED"
    SKIPPED = "SKIPPED"
    FILTERED = "FILTERED"
    FAILED = "FAILED"


class LogLevel(Enum):
    """Log levels for mp3sync."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR


def configure_logging(
    level: LogLevel = LogLevel.WARNING,
    log_file: str | Path | None = None,
) -> logging.Logger:
    """Configure the package logger.

    Existing handlers are replaced, so calling this twice is safe.

    Args:
        level: Minimum log level to emit.
        log_file: Optional path to also write logs to a file.

    Returns:
        The configured package logger.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level.value)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=TIMESTAMP_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    return root


def log_file_status(
    logger: logging.Logger,
    status: FileStatus,
    source_path: str,
    dest_path: str | None = None,
    reason: str = "",
) -> None:
    """Log the outcome for a single file.

    Args:
        logger: Logger to write to.
        status: File operation status.
        source_path: Source file path.
        dest_path: Destination file path (optional).
        reason: Reason for the status (especially for failures).
    """
    dest_info = f" -> {dest_path}" if dest_path else ""
    reason_info = f" ({reason})" if reason else ""
    message = f"[{status.value}] {source_path}{dest_info}{reason_info}"

    if status == FileStatus.FAILED:
        logger.error(message)
    else:
        logger.debug(message)


def error_log_path(log_dir: str | Path = DEFAULT_LOG_DIR, now: datetime | None = None) -> Path:
    """Build the path of the error log file for a run.

    Args:
        log_dir: Directory holding the error logs.
        now: Timestamp of the run. Defaults to the current time.

    Returns:
        Path like ``logs/20240115-103000.log``.
    """
    now = now or datetime.now()
    return Path(log_dir) / f"{now.strftime(ERROR_LOG_NAME_FORMAT)}.log"


def log_errors(
    errors: Iterable[BaseException],
    log_dir: str | Path = DEFAULT_LOG_DIR,
    now: datetime | None = None,
) -> Path:
    """Append one line per error message to the run's error log.

    Args:
        errors: Errors to write.
        log_dir: Directory holding the error logs. Created if missing.
        now: Timestamp of the run. Defaults to the current time.

    Returns:
        Path of the written log file.

    Raises:
        LogWriteError: If the log file cannot be written.
    """
    path = error_log_path(log_dir, now)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as f:
            for error in errors:
                f.write(f"{error}\n")
    except OSError as e:
        raise LogWriteError(f"failed to write log file {path}: {e}") from e

    logging.getLogger(__name__).info("Logged errors in %s", path)
    return path

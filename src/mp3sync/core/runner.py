"""Sync runner: drives a complete sync run.

The runner executes the phases of a run in order:

1. scan source and destination concurrently
2. filter and transform the source files into destination paths
3. diff against the destination listing
4. report disk space and refuse plans that do not fit
5. copy after confirmation

It never prints. Progress is reported as SyncEvent objects to an optional
callback, and questions go through a prompter callable, so any presentation
layer (or a test) can drive it.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

from mp3sync.core.copier import execute_sync_plan
from mp3sync.core.differ import diff
from mp3sync.core.diskspace import check_disk_space, ensure_admissible
from mp3sync.core.logger import log_errors
from mp3sync.core.metadata_audio import TagReader, read_tag
from mp3sync.core.models import AbortedByUser, DiskSpaceReport, SyncError, SyncPlan
from mp3sync.core.scanner import scan_trees
from mp3sync.core.transform import transform_all

if TYPE_CHECKING:
    from mp3sync.config.settings import Settings

logger = logging.getLogger(__name__)

QUESTION_CONTINUE = "Continue (errored files will be skipped)? [Y/n/s = show files] "
QUESTION_SHOW_DIFF = "Show files to sync? [Y/n] "
QUESTION_START = "Start Sync? [Y/n] "

ANSWER_NO = "n"
ANSWER_SHOW = "s"

# Asks the user a question and returns the raw answer
Prompter = Callable[[str], str]


class SyncPhase(Enum):
    """Phases of a sync run."""

    SCAN = "scan"
    TRANSFORM = "transform"
    DIFF = "diff"
    SYNC = "sync"


class SyncEventType(Enum):
    """Types of events emitted by the runner."""

    PHASE_STARTED = "phase_started"
    PHASE_COMPLETED = "phase_completed"
    ERRORS_FOUND = "errors_found"
    ERROR_LIST = "error_list"
    DIFF_LIST = "diff_list"
    DISK_SPACE = "disk_space"
    NOTHING_TO_SYNC = "nothing_to_sync"
    FILE_PROCESSED = "file_processed"


@dataclass
class SyncEvent:
    """Event emitted by the runner. ``data`` only holds plain values."""

    event_type: SyncEventType
    data: dict[str, Any] = field(default_factory=dict)


EventCallback = Callable[[SyncEvent], None]


@dataclass
class SyncResult:
    """Outcome of a sync run that was not aborted by a fatal error."""

    source_files: int = 0
    destination_files: int = 0
    transformed_files: int = 0
    planned_files: int = 0
    copied_files: int = 0
    disk_space: DiskSpaceReport | None = None
    errors: list[SyncError] = field(default_factory=list)
    log_file: str | None = None
    dry_run: bool = False

    @property
    def has_errors(self) -> bool:
        """Check if any per-file error was collected."""
        return bool(self.errors)

    @property
    def in_sync_files(self) -> int:
        """Number of transformed files that needed no action."""
        return self.transformed_files - self.planned_files

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "source_files": self.source_files,
            "destination_files": self.destination_files,
            "transformed_files": self.transformed_files,
            "planned_files": self.planned_files,
            "copied_files": self.copied_files,
            "disk_space": self.disk_space.to_dict() if self.disk_space else None,
            "errors": [str(e) for e in self.errors],
            "log_file": self.log_file,
            "dry_run": self.dry_run,
        }


def _always_yes(question: str) -> str:
    return ""


class SyncRunner:
    """Runs the scan, transform, diff, disk check and copy phases."""

    def __init__(
        self,
        settings: Settings,
        prompter: Prompter | None = None,
        on_event: EventCallback | None = None,
        tag_reader: TagReader = read_tag,
    ) -> None:
        """Initialize the runner.

        Args:
            settings: Validated configuration.
            prompter: Asks confirmation questions. Defaults to answering yes.
            on_event: Receives progress events. Events are discarded if None.
            tag_reader: Reads the tag of a source file.
        """
        self._settings = settings
        self._prompter = prompter or _always_yes
        self._on_event = on_event
        self._tag_reader = tag_reader
        self._started_at = datetime.now()

    def _emit(self, event_type: SyncEventType, **data: Any) -> None:
        if self._on_event is not None:
            self._on_event(SyncEvent(event_type=event_type, data=data))

    def _ask(self, question: str) -> str:
        return self._prompter(question).strip().lower()

    def _phase_started(self, phase: SyncPhase, message: str) -> float:
        self._emit(SyncEventType.PHASE_STARTED, phase=phase.value, message=message)
        return time.monotonic()

    def _phase_completed(self, phase: SyncPhase, started: float, message: str) -> None:
        duration = time.monotonic() - started
        logger.info("%s (%.2fs)", message, duration)
        self._emit(
            SyncEventType.PHASE_COMPLETED,
            phase=phase.value,
            message=message,
            duration=duration,
        )

    def _log_errors(self, errors: list[SyncError], result: SyncResult) -> None:
        # All errors of a run go to the same file
        path = str(log_errors(errors, self._settings.log_dir, now=self._started_at))
        result.log_file = path
        self._emit(SyncEventType.ERRORS_FOUND, count=len(errors), log_file=path)

    def _confirm_continue(self, errors: list[SyncError]) -> None:
        answer = self._ask(QUESTION_CONTINUE)
        if answer == ANSWER_NO:
            raise AbortedByUser()
        if answer == ANSWER_SHOW:
            self._emit(SyncEventType.ERROR_LIST, errors=[str(e) for e in errors])

    def _show_diff(self, plan: SyncPlan) -> None:
        if self._ask(QUESTION_SHOW_DIFF) == ANSWER_NO:
            return
        self._emit(
            SyncEventType.DIFF_LIST,
            items=[
                {
                    "source": item.source.path,
                    "target": item.target,
                    "overwrite": item.is_overwrite,
                    "size": item.source.size,
                }
                for item in plan
            ],
        )

    def _on_progress(
        self,
        index: int,
        total: int,
        current_file: str,
        bytes_copied: int,
        total_bytes: int,
    ) -> None:
        self._emit(
            SyncEventType.FILE_PROCESSED,
            index=index,
            total=total,
            file=current_file,
            bytes_copied=bytes_copied,
            total_bytes=total_bytes,
        )

    def run(self, dry_run: bool = False) -> SyncResult:
        """Execute a complete sync run.

        Args:
            dry_run: Stop after the plan and disk space report, copying nothing.

        Returns:
            SyncResult with counts and the collected per-file errors.

        Raises:
            ScanError: If source or destination cannot be scanned.
            LogWriteError: If the error log cannot be written.
            DiskInfoError: If the destination volume cannot be queried.
            InsufficientDiskSpaceError: If the plan does not fit.
            AbortedByUser: If the user declines a confirmation.
        """
        settings = self._settings
        result = SyncResult(dry_run=dry_run)
        errors: list[SyncError] = []

        # 1. read file lists from source (with filter) and destination (without)
        started = self._phase_started(SyncPhase.SCAN, "Read files ...")
        source_files, destination_files = scan_trees(
            settings.source, settings.destination, settings.filter
        )
        result.source_files = len(source_files)
        result.destination_files = len(destination_files)
        self._phase_completed(
            SyncPhase.SCAN,
            started,
            f"{len(source_files)} source and {len(destination_files)} destination files read",
        )

        # 2. filter & transform source
        started = self._phase_started(
            SyncPhase.TRANSFORM, "Filter & transform files to be synced ..."
        )
        transformed, tag_errors = transform_all(
            source_files,
            settings.destination,
            settings.source,
            settings.filter,
            self._tag_reader,
        )
        result.transformed_files = len(transformed)
        if tag_errors:
            errors.extend(tag_errors)
            self._log_errors(list(tag_errors), result)
            self._confirm_continue(list(tag_errors))
        self._phase_completed(
            SyncPhase.TRANSFORM,
            started,
            f"{len(source_files)} files filtered and transformed result in {len(transformed)} files",
        )

        # 3. diff against destination
        started = self._phase_started(SyncPhase.DIFF, "Compare with destination ...")
        plan = diff(transformed, destination_files)
        result.planned_files = len(plan)
        self._phase_completed(
            SyncPhase.DIFF,
            started,
            f"{len(plan)} files to sync ({plan.copies} new, {plan.overwrites} changed)",
        )
        result.errors = errors

        if not plan:
            self._emit(SyncEventType.NOTHING_TO_SYNC, in_sync=result.in_sync_files)
            return result

        # 4. list diff on request
        self._show_diff(plan)

        # 5. disk space
        report = check_disk_space(plan, settings.destination)
        result.disk_space = report
        self._emit(
            SyncEventType.DISK_SPACE,
            free=report.free,
            needed=report.needed,
            left=report.left,
        )
        ensure_admissible(report)

        if dry_run:
            return result

        # 6. run operations
        if self._ask(QUESTION_START) == ANSWER_NO:
            raise AbortedByUser()

        started = self._phase_started(SyncPhase.SYNC, "Sync files ...")
        copy_errors = execute_sync_plan(plan, progress_callback=self._on_progress)
        result.copied_files = len(plan) - len(copy_errors)
        if copy_errors:
            errors.extend(copy_errors)
            self._log_errors(list(copy_errors), result)
        self._phase_completed(SyncPhase.SYNC, started, f"{result.copied_files} files synced")

        return result

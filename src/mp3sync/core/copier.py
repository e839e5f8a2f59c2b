"""Copy engine for mp3sync.

Executes a sync plan one file at a time with shutil.copy2 (preserving
timestamps). A failing file is recorded and the batch continues.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Callable

from mp3sync.core.logger import FileStatus, log_file_status
from mp3sync.core.models import CopyError, SyncFile, SyncPlan

logger = logging.getLogger(__name__)

# Type alias for progress callbacks
# (current_file_index, total_files, current_file_path, bytes_copied_so_far, total_bytes)
ProgressCallback = Callable[[int, int, str, int, int], None]


def copy_file(item: SyncFile) -> None:
    """Copy one planned file to its target, creating missing folders.

    An existing target file is overwritten.

    Args:
        item: The planned sync action.

    Raises:
        CopyError: If the copy fails or a directory is in the way.
    """
    target = Path(item.target)
    if target.is_dir():
        raise CopyError(item.source.path, item.target, "target is a directory")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(item.source.path, target)
    except OSError as e:
        raise CopyError(item.source.path, item.target, e.strerror or str(e)) from e


def execute_sync_plan(
    plan: SyncPlan,
    progress_callback: ProgressCallback | None = None,
) -> list[CopyError]:
    """Execute every action of a sync plan.

    Runs to the end of the plan even when single files fail.

    Args:
        plan: The sync plan to execute.
        progress_callback: Optional callback called once per processed file
            with (current_index, total, current_file, bytes_so_far, total_bytes).

    Returns:
        List of per-file copy errors. Empty when every file was copied.
    """
    errors: list[CopyError] = []
    total_items = len(plan)
    total_bytes = plan.needed_bytes
    bytes_copied_so_far = 0

    for i, item in enumerate(plan):
        try:
            copy_file(item)
        except CopyError as e:
            errors.append(e)
            log_file_status(logger, FileStatus.FAILED, item.source.path, item.target, e.reason)
        else:
            bytes_copied_so_far += item.source.size
            log_file_status(logger, FileStatus.COPIED, item.source.path, item.target)

        if progress_callback:
            progress_callback(
                i + 1,
                total_items,
                item.source.path,
                bytes_copied_so_far,
                total_bytes,
            )

    logger.info("Synced %d of %d files", total_items - len(errors), total_items)
    return errors

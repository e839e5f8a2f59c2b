"""Disk-space admission control for a sync plan."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from mp3sync.core.models import (
    DiskInfoError,
    DiskSpaceReport,
    InsufficientDiskSpaceError,
    SyncPlan,
)

logger = logging.getLogger(__name__)


def get_free_space(path: str | Path) -> int:
    """Get the free space of the volume backing a path.

    Args:
        path: Any path on the volume.

    Returns:
        Free space in bytes.

    Raises:
        DiskInfoError: If the volume cannot be queried.
    """
    try:
        return shutil.disk_usage(path).free
    except OSError as e:
        raise DiskInfoError(f"failed to get disk info for {path}: {e}") from e


def check_disk_space(plan: SyncPlan, destination_root: str | Path) -> DiskSpaceReport:
    """Compute free, needed and remaining space for a plan.

    ``needed`` is the sum of all source sizes in the plan. Destination files
    being overwritten are not subtracted, so the estimate is conservative.

    Args:
        plan: The sync plan.
        destination_root: Root of the destination tree.

    Returns:
        DiskSpaceReport for the destination volume.

    Raises:
        DiskInfoError: If the volume cannot be queried.
    """
    report = DiskSpaceReport(free=get_free_space(destination_root), needed=plan.needed_bytes)
    logger.info(
        "Disk space on %s: free=%d needed=%d left=%d",
        destination_root,
        report.free,
        report.needed,
        report.left,
    )
    return report


def ensure_admissible(report: DiskSpaceReport) -> None:
    """Fail unless at least one byte is left after the sync.

    Args:
        report: Disk space report of the plan.

    Raises:
        InsufficientDiskSpaceError: If ``report.left`` is below 1.
    """
    if report.is_admissible:
        return
    short = 1 - report.left
    raise InsufficientDiskSpaceError(
        f"not enough disk space: {short} bytes short of keeping 1 byte free "
        f"(free {format_size(report.free)}, needed {format_size(report.needed)})"
    )


def format_size(size_bytes: int) -> str:
    """Format a byte count in human-readable form.

    Args:
        size_bytes: Size in bytes, may be negative.

    Returns:
        Formatted size string.
    """
    sign = "-" if size_bytes < 0 else ""
    size = abs(size_bytes)
    if size >= 1024**4:
        return f"{sign}{size / (1024**4):.1f} TB"
    elif size >= 1024**3:
        return f"{sign}{size / (1024**3):.1f} GB"
    elif size >= 1024**2:
        return f"{sign}{size / (1024**2):.1f} MB"
    elif size >= 1024:
        return f"{sign}{size / 1024:.1f} KB"
    else:
        return f"{sign}{size} B"

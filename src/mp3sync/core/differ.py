"""Diff engine: decides which transformed source files need a sync."""

from __future__ import annotations

import logging
from typing import Iterable

from mp3sync.core.logger import FileStatus, log_file_status
from mp3sync.core.models import FileEntry, SyncFile, SyncPlan, TransformedFile

logger = logging.getLogger(__name__)


def index_listing(listing: Iterable[FileEntry]) -> dict[str, FileEntry]:
    """Index a destination listing by exact path."""
    return {entry.path: entry for entry in listing}


def diff(
    transformed: Iterable[TransformedFile],
    destination_listing: Iterable[FileEntry],
) -> SyncPlan:
    """Build the sync plan from transformed source files.

    Each file is looked up at its computed path in the destination listing.
    Files whose destination exists with the same size are in sync and left
    out of the plan. Only the size is compared, not the content.

    When several source files map to the same destination path, the first
    one in enumeration order is kept and the others are skipped with a
    warning, so they do not overwrite each other on every run.

    Args:
        transformed: Transformed source files in enumeration order.
        destination_listing: Unfiltered listing of the destination tree.

    Returns:
        SyncPlan with the files to copy or overwrite, in input order.
    """
    existing = index_listing(destination_listing)
    plan = SyncPlan()
    in_sync = 0
    claimed: dict[str, str] = {}

    for item in transformed:
        if not item.destination_path:
            continue

        first_source = claimed.setdefault(item.destination_path, item.source.path)
        if first_source != item.source.path:
            logger.warning(
                "%s maps to the same destination as %s, skipping: %s",
                item.source.path,
                first_source,
                item.destination_path,
            )
            continue

        sync_file = SyncFile(
            source=item.source,
            destination=existing.get(item.destination_path, FileEntry.missing()),
            target=item.destination_path,
        )

        if sync_file.is_in_sync():
            in_sync += 1
            log_file_status(
                logger, FileStatus.SKIPPED, item.source.path, item.destination_path, "in sync"
            )
            continue

        plan.add(sync_file)

    logger.info("%d files to sync, %d already in sync", len(plan), in_sync)
    return plan

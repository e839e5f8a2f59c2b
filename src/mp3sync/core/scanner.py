"""Tree scanner for enumerating source and destination files."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from mp3sync.core.filters import SyncFilter
from mp3sync.core.models import FileEntry, ScanError

logger = logging.getLogger(__name__)

# Extensions to ignore (temporary/system files)
IGNORED_EXTENSIONS: set[str] = {
    ".tmp",
    ".temp",
    ".bak",
    ".swp",
    ".swo",
    ".part",
    ".crdownload",
    ".partial",
    ".download",
}

# File name patterns to ignore (temporary/system files)
IGNORED_PATTERNS: set[str] = {
    ".DS_Store",
    "Thumbs.db",
    "desktop.ini",
    ".gitignore",
    ".gitkeep",
}


def should_ignore_file(file_name: str) -> bool:
    """Check if a file should be ignored.

    Args:
        file_name: Base name of the file.

    Returns:
        True if the file should be ignored.
    """
    if file_name in IGNORED_PATTERNS:
        return True

    # Hidden files (Unix-style)
    if file_name.startswith("."):
        return True

    if os.path.splitext(file_name)[1].lower() in IGNORED_EXTENSIONS:
        return True

    return False


def _accepts(file_name: str, sync_filter: SyncFilter | None) -> bool:
    if sync_filter is None:
        return True
    if should_ignore_file(file_name):
        return False
    return sync_filter.accepts_extension(os.path.splitext(file_name)[1])


def _raise_walk_error(error: OSError) -> None:
    raise error


def scan_tree(root: str | Path, sync_filter: SyncFilter | None = None) -> list[FileEntry]:
    """Enumerate all regular files below a root directory.

    Directories are traversed but not returned. Directory and file names are
    visited in sorted order so the listing is stable between runs.

    Args:
        root: Directory to scan.
        sync_filter: Optional filter. When given, system/temporary files and
            files with an extension outside the filter's allowlist are skipped.
            Tag filtering is left to the transformer.

    Returns:
        List of FileEntry in enumeration order.

    Raises:
        ScanError: If the root does not exist or any directory or file cannot
            be read. No partial listing is returned.
    """
    root_str = str(root)
    if not os.path.isdir(root_str):
        raise ScanError(f"path does not exist: {root_str}")

    entries: list[FileEntry] = []
    try:
        for dir_path, dir_names, file_names in os.walk(root_str, onerror=_raise_walk_error):
            dir_names.sort()
            for file_name in sorted(file_names):
                if not _accepts(file_name, sync_filter):
                    continue
                file_path = os.path.join(dir_path, file_name)
                if not os.path.isfile(file_path):
                    continue
                entries.append(FileEntry.from_path(file_path))
    except OSError as e:
        raise ScanError(f"failed to scan {root_str}: {e}") from e

    logger.info("Scanned %d files in %s", len(entries), root_str)
    return entries


def scan_trees(
    source: str | Path,
    destination: str | Path,
    sync_filter: SyncFilter | None = None,
) -> tuple[list[FileEntry], list[FileEntry]]:
    """Scan the source and destination trees concurrently.

    The source is scanned with the filter, the destination without it so that
    renamed files can still be matched. Both scans are waited for; if both
    fail, the source error is raised.

    Args:
        source: Root of the source tree.
        destination: Root of the destination tree.
        sync_filter: Filter applied to the source scan.

    Returns:
        Tuple of (source listing, destination listing).

    Raises:
        ScanError: If either scan fails.
    """
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="scan") as executor:
        source_future = executor.submit(scan_tree, source, sync_filter)
        destination_future = executor.submit(scan_tree, destination, None)

        source_error = source_future.exception()
        destination_error = destination_future.exception()

    if source_error is not None:
        raise source_error
    if destination_error is not None:
        raise destination_error

    return source_future.result(), destination_future.result()

"""Path transformer: computes the canonical destination path of a source file.

The destination layout is::

    <destination root>/<bucket>/<Artist> - <Album> (<Year>) - <Disk> - <Track> - <Title><ext>

where the bucket is the uppercased first letter of the file's top-level
folder under the source root ("#" for anything that is not A-Z).
"""

from __future__ import annotations

import logging
import os
from typing import Iterable

from mp3sync.core.filters import SyncFilter
from mp3sync.core.logger import FileStatus, log_file_status
from mp3sync.core.metadata_audio import Tag, TagReader, read_tag
from mp3sync.core.models import FileEntry, TagParseError, TransformedFile

logger = logging.getLogger(__name__)

DEFAULT_SUBFOLDER = "default"
NUMERIC_SUBFOLDER = "#"
NAME_SEPARATOR = " - "

# Characters that are not safe in file names on common filesystems.
# No replacement is itself a key, so sanitizing is idempotent.
CHAR_REPLACEMENTS: dict[str, str] = {
    ":": ";",
    "\\": "",
    "/": "",
    "?": "¿",
    '"': ",",
    "'": ",",
    "*": "x",
    "+": "x",
    "[": "(",
    "]": ")",
    ">": "-",
    "<": "-",
    "|": "-",
}

_TRANSLATION_TABLE = str.maketrans(CHAR_REPLACEMENTS)


def sanitize_name(name: str) -> str:
    """Replace characters that are illegal in file names.

    Args:
        name: Assembled file name.

    Returns:
        Sanitized file name.
    """
    return name.translate(_TRANSLATION_TABLE)


def get_subfolder(file_path: str, source_root: str) -> str:
    """Compute the bucket folder of a source file.

    Args:
        file_path: Full path of the source file.
        source_root: Root of the source tree.

    Returns:
        An uppercase letter A-Z, "#" for any other first character, or
        "default" when the file has no path relative to the root.
    """
    relative = os.path.relpath(file_path, source_root) if file_path else ""
    parts = [p for p in relative.split(os.sep) if p and p != os.curdir]
    if not parts:
        return DEFAULT_SUBFOLDER

    first = parts[0][0].upper()
    if len(first) == 1 and "A" <= first <= "Z":
        return first
    return NUMERIC_SUBFOLDER


def pad_track(track: str) -> str:
    """Zero-pad a single character track number to two digits."""
    if len(track) == 1:
        return "0" + track
    return track


def build_filename(tag: Tag, extension: str) -> str:
    """Assemble the destination file name from tag fields.

    Empty fields are left out. The year is only used together with an album.

    Args:
        tag: Tag of the source file.
        extension: Original extension including the dot, appended verbatim.

    Returns:
        Sanitized file name.

    Raises:
        ValueError: If every tag field used in the name is empty.
    """
    album = tag.album
    if album and tag.year:
        album = f"{album} ({tag.year})"

    track = pad_track(tag.track_number) if tag.track_number else ""

    parts = [tag.artist, album, tag.disk_number, track, tag.title]
    stem = NAME_SEPARATOR.join(part for part in parts if part)
    if not stem:
        raise ValueError("tag has no artist, album, disk, track or title")

    return sanitize_name(stem + extension)


def transform_entry(
    entry: FileEntry,
    destination_root: str,
    source_root: str,
    sync_filter: SyncFilter | None = None,
    tag_reader: TagReader = read_tag,
) -> str:
    """Compute the destination path of a single source file.

    Args:
        entry: Scanned source file.
        destination_root: Root of the destination tree.
        source_root: Root of the source tree.
        sync_filter: Whitelist/blacklist to apply. None accepts every file.
        tag_reader: Function reading the tag of a file.

    Returns:
        The destination path, or an empty string if the filter excludes the file.

    Raises:
        TagParseError: If the tag cannot be read or has no usable fields.
    """
    tag = tag_reader(entry.path)

    if sync_filter is not None and not sync_filter.accepts(tag):
        return ""

    try:
        name = build_filename(tag, entry.extension)
    except ValueError as e:
        raise TagParseError(entry.path, str(e)) from e

    return os.path.join(destination_root, get_subfolder(entry.path, source_root), name)


def transform_all(
    entries: Iterable[FileEntry],
    destination_root: str,
    source_root: str,
    sync_filter: SyncFilter | None = None,
    tag_reader: TagReader = read_tag,
) -> tuple[list[TransformedFile], list[TagParseError]]:
    """Transform every source entry, collecting tag errors instead of aborting.

    Args:
        entries: Scanned source files in enumeration order.
        destination_root: Root of the destination tree.
        source_root: Root of the source tree.
        sync_filter: Whitelist/blacklist to apply.
        tag_reader: Function reading the tag of a file.

    Returns:
        Tuple of (transformed files in input order, tag errors). Files
        excluded by the filter appear in neither list.
    """
    transformed: list[TransformedFile] = []
    errors: list[TagParseError] = []
    total = 0

    for entry in entries:
        total += 1
        try:
            destination_path = transform_entry(
                entry, destination_root, source_root, sync_filter, tag_reader
            )
        except TagParseError as e:
            log_file_status(logger, FileStatus.FAILED, entry.path, reason=e.reason)
            errors.append(e)
            continue

        if not destination_path:
            log_file_status(logger, FileStatus.FILTERED, entry.path)
            continue

        transformed.append(TransformedFile(source=entry, destination_path=destination_path))

    logger.info(
        "Transformed %d files into %d destination paths (%d errors)",
        total,
        len(transformed),
        len(errors),
    )
    return transformed, errors

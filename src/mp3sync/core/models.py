"""Core data models for mp3sync."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator


class SyncError(Exception):
    """Base class for all mp3sync errors."""

    pass


class ScanError(SyncError):
    """Raised when a directory tree cannot be enumerated."""

    pass


class TagParseError(SyncError):
    """Raised when the tag of a single file cannot be read or used."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"failed to parse tag from {path}: {reason}")


class CopyError(SyncError):
    """Raised (and collected) when a single file cannot be copied."""

    def __init__(self, source: str, target: str, reason: str) -> None:
        self.source = source
        self.target = target
        self.reason = reason
        super().__init__(f"failed to copy {source} to {target}: {reason}")


class DiskInfoError(SyncError):
    """Raised when the free space of the destination volume cannot be queried."""

    pass


class InsufficientDiskSpaceError(SyncError):
    """Raised when the sync plan does not fit on the destination volume."""

    pass


class LogWriteError(SyncError):
    """Raised when the error log file cannot be written."""

    pass


class AbortedByUser(SyncError):
    """Raised when the user declines a confirmation prompt."""

    def __init__(self, message: str = "aborted by user") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class FileEntry:
    """A regular file found while scanning a tree.

    An entry with an empty ``path`` is the sentinel for "does not exist".
    """

    path: str
    size: int = 0
    mod_time: float = 0.0
    is_dir: bool = False

    @property
    def exists(self) -> bool:
        """Check if the entry points at an existing file."""
        return bool(self.path)

    @property
    def name(self) -> str:
        """Base name of the file."""
        return os.path.basename(self.path)

    @property
    def extension(self) -> str:
        """File extension including the dot, as found on disk."""
        return os.path.splitext(self.path)[1]

    @classmethod
    def missing(cls) -> FileEntry:
        """Build the sentinel entry for a destination that does not exist."""
        return cls(path="")

    @classmethod
    def from_path(cls, file_path: str | Path) -> FileEntry:
        """Create a FileEntry from a path on disk.

        Args:
            file_path: Path to the file.

        Returns:
            FileEntry with size and modification time from ``stat``.
        """
        stat_result = os.stat(file_path)
        return cls(
            path=str(file_path),
            size=stat_result.st_size,
            mod_time=stat_result.st_mtime,
            is_dir=os.path.isdir(file_path),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "path": self.path,
            "size": self.size,
            "mod_time": self.mod_time,
            "is_dir": self.is_dir,
        }


@dataclass(frozen=True)
class TransformedFile:
    """A source entry together with its computed destination path."""

    source: FileEntry
    destination_path: str


@dataclass(frozen=True)
class SyncFile:
    """One candidate sync action.

    ``destination`` is the entry found in the destination listing, or the
    missing sentinel. ``target`` is where the source gets copied to.
    """

    source: FileEntry
    destination: FileEntry
    target: str

    def is_in_sync(self) -> bool:
        """Check if the destination exists with the same size as the source."""
        return self.destination.exists and self.source.size == self.destination.size

    @property
    def is_overwrite(self) -> bool:
        """Check if executing this action replaces an existing file."""
        return self.destination.exists

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "source": self.source.to_dict(),
            "destination": self.destination.to_dict(),
            "target": self.target,
        }


@dataclass
class SyncPlan:
    """Ordered list of files that need a copy or overwrite."""

    items: list[SyncFile] = field(default_factory=list)

    def add(self, item: SyncFile) -> None:
        """Append an item to the plan."""
        self.items.append(item)

    @property
    def needed_bytes(self) -> int:
        """Sum of the source sizes of all planned files.

        Sizes of destination files being overwritten are not subtracted, so
        this is an upper bound of the additional space required.
        """
        return sum(item.source.size for item in self.items)

    @property
    def copies(self) -> int:
        """Number of files that do not exist at the destination yet."""
        return sum(1 for item in self.items if not item.is_overwrite)

    @property
    def overwrites(self) -> int:
        """Number of existing destination files that get replaced."""
        return sum(1 for item in self.items if item.is_overwrite)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[SyncFile]:
        return iter(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)


@dataclass(frozen=True)
class DiskSpaceReport:
    """Free, needed and remaining bytes on the destination volume."""

    free: int
    needed: int

    @property
    def left(self) -> int:
        """Bytes remaining after the sync (negative when short)."""
        return self.free - self.needed

    @property
    def is_admissible(self) -> bool:
        """Check if at least one byte is left after the sync."""
        return self.left >= 1

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"free": self.free, "needed": self.needed, "left": self.left}

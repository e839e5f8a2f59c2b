"""Tag filters deciding which source files take part in a sync.

A filter has two predicate sets:

- whitelist: when non-empty, a file must match at least one entry
- blacklist: a file matching any entry is excluded, regardless of the whitelist

Values are compared case-insensitively after stripping whitespace.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from mp3sync.core.metadata_audio import Tag

# Default audio file extensions accepted when scanning the source
DEFAULT_EXTENSIONS: tuple[str, ...] = (".mp3",)


def _normalize(value: str) -> str:
    return value.strip().casefold()


def normalize_extension(ext: str) -> str:
    """Normalize an extension to lowercase with a leading dot.

    Args:
        ext: Extension like "mp3" or ".MP3".

    Returns:
        Normalized extension like ".mp3".
    """
    ext = ext.strip().lower()
    return ext if ext.startswith(".") else f".{ext}"


@dataclass
class TagFilter:
    """Maps tag field names to the set of values they are matched against."""

    fields: dict[str, set[str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        unknown = set(self.fields) - Tag.field_names()
        if unknown:
            raise ValueError(f"unknown tag fields in filter: {', '.join(sorted(unknown))}")
        self.fields = {
            name: {_normalize(v) for v in values if _normalize(v)}
            for name, values in self.fields.items()
        }
        self.fields = {name: values for name, values in self.fields.items() if values}

    def __len__(self) -> int:
        return sum(len(values) for values in self.fields.values())

    @property
    def is_empty(self) -> bool:
        """Check if the filter has no entries."""
        return len(self) == 0

    def matches(self, tag: Tag) -> bool:
        """Check if any configured field of the tag holds one of its values.

        Args:
            tag: Tag to test.

        Returns:
            True if at least one entry matches.
        """
        return any(_normalize(tag.get(name)) in values for name, values in self.fields.items())

    def to_dict(self) -> dict[str, list[str]]:
        """Serialize to dictionary."""
        return {name: sorted(values) for name, values in self.fields.items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> TagFilter:
        """Deserialize from dictionary.

        Single strings are accepted in place of a list of values.
        """
        if not data:
            return cls()
        parsed: dict[str, set[str]] = {}
        for name, values in data.items():
            if isinstance(values, str):
                values = [values]
            parsed[name] = {str(v) for v in values}
        return cls(fields=parsed)


@dataclass
class SyncFilter:
    """Whitelist, blacklist and extension allowlist applied to source files."""

    whitelist: TagFilter = field(default_factory=TagFilter)
    blacklist: TagFilter = field(default_factory=TagFilter)
    extensions: list[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))

    def __post_init__(self) -> None:
        self.extensions = [normalize_extension(ext) for ext in self.extensions if ext.strip()]

    def accepts(self, tag: Tag) -> bool:
        """Apply the filter policy to a tag.

        The blacklist takes precedence over the whitelist.

        Args:
            tag: Tag of the source file.

        Returns:
            True if the file takes part in the sync.
        """
        if not self.blacklist.is_empty and self.blacklist.matches(tag):
            return False
        if not self.whitelist.is_empty and not self.whitelist.matches(tag):
            return False
        return True

    def accepts_extension(self, extension: str) -> bool:
        """Check a file extension against the allowlist (empty allows all)."""
        if not self.extensions:
            return True
        return normalize_extension(extension) in self.extensions

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "extensions": list(self.extensions),
            "whitelist": self.whitelist.to_dict(),
            "blacklist": self.blacklist.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SyncFilter:
        """Deserialize from dictionary."""
        data = data or {}
        unknown = set(data) - {"extensions", "whitelist", "blacklist"}
        if unknown:
            raise ValueError(f"unknown filter keys: {', '.join(sorted(unknown))}")
        return cls(
            whitelist=TagFilter.from_dict(data.get("whitelist")),
            blacklist=TagFilter.from_dict(data.get("blacklist")),
            extensions=data.get("extensions", list(DEFAULT_EXTENSIONS)),
        )

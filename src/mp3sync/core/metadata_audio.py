"""Audio tag extraction module for mp3sync."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Callable

import mutagen
from mutagen import MutagenError
from mutagen.id3 import ID3

from mp3sync.core.models import TagParseError

# ID3 frames holding each tag field
FRAME_ARTIST = "TPE1"
FRAME_ALBUM = "TALB"
FRAME_YEAR = "TDRC"
FRAME_DISK = "TPOS"
FRAME_TRACK = "TRCK"
FRAME_TITLE = "TIT2"
FRAME_GENRE = "TCON"

# Extensions read as plain ID3 tags
ID3_EXTENSIONS = {".mp3"}


@dataclass(frozen=True)
class Tag:
    """Embedded metadata of an audio file. Every field may be empty."""

    artist: str = ""
    album: str = ""
    year: str = ""
    disk_number: str = ""
    track_number: str = ""
    title: str = ""
    genre: str = ""

    @classmethod
    def field_names(cls) -> set[str]:
        """Names of all tag fields usable in filters."""
        return {f.name for f in fields(cls)}

    def get(self, field_name: str) -> str:
        """Get a field value by name.

        Args:
            field_name: One of ``Tag.field_names()``.

        Returns:
            The field value.
        """
        return getattr(self, field_name)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {name: self.get(name) for name in sorted(self.field_names())}


# Reads the Tag of a file; raises TagParseError on failure
TagReader = Callable[[str], Tag]


def _frame_text(tags: ID3, frame_id: str) -> str:
    """Get the first text value of an ID3 frame.

    Args:
        tags: Loaded ID3 tags.
        frame_id: Four letter frame identifier.

    Returns:
        The frame text, or empty string if the frame is absent.
    """
    frame = tags.get(frame_id)
    if frame is None or not frame.text:
        return ""
    return str(frame.text[0]).strip()


def _get_first_tag(tags: Any, key: str) -> str:
    """Get the first value of an easy tag key.

    Args:
        tags: Mapping of easy tag keys to value lists.
        key: Key to look up.

    Returns:
        The first found value, or empty string.
    """
    value = tags.get(key)
    if not value:
        return ""
    if isinstance(value, list):
        return str(value[0]).strip()
    return str(value).strip()


def _read_id3_tag(path: Path) -> Tag:
    tags = ID3(path)
    return Tag(
        artist=_frame_text(tags, FRAME_ARTIST),
        album=_frame_text(tags, FRAME_ALBUM),
        year=_frame_text(tags, FRAME_YEAR),
        disk_number=_frame_text(tags, FRAME_DISK),
        track_number=_frame_text(tags, FRAME_TRACK),
        title=_frame_text(tags, FRAME_TITLE),
        genre=_frame_text(tags, FRAME_GENRE),
    )


def _read_easy_tag(path: Path) -> Tag:
    audio = mutagen.File(path, easy=True)
    if audio is None:
        raise TagParseError(str(path), "unsupported audio format")
    if not audio.tags:
        raise TagParseError(str(path), "no tag found")

    tags = audio.tags
    return Tag(
        artist=_get_first_tag(tags, "artist"),
        album=_get_first_tag(tags, "album"),
        year=_get_first_tag(tags, "date"),
        disk_number=_get_first_tag(tags, "discnumber"),
        track_number=_get_first_tag(tags, "tracknumber"),
        title=_get_first_tag(tags, "title"),
        genre=_get_first_tag(tags, "genre"),
    )


def read_tag(file_path: str | Path) -> Tag:
    """Read the embedded tag of an audio file.

    MP3 files are read frame by frame from their ID3 tag. Other formats
    (FLAC, M4A, OGG, ...) go through mutagen's generic "easy" interface.

    Args:
        file_path: Path to the audio file.

    Returns:
        Tag with the extracted fields.

    Raises:
        TagParseError: If the file has no readable tag.
    """
    path = Path(file_path)
    try:
        if path.suffix.lower() in ID3_EXTENSIONS:
            return _read_id3_tag(path)
        return _read_easy_tag(path)
    except TagParseError:
        raise
    except (MutagenError, OSError, ValueError) as e:
        raise TagParseError(str(path), str(e)) from e

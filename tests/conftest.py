"""Shared fixtures for the mp3sync tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest
from mutagen.id3 import ID3, TALB, TCON, TDRC, TIT2, TPE1, TPOS, TRCK

from mp3sync.core.metadata_audio import Tag, TagReader
from mp3sync.core.models import TagParseError

MakeMp3 = Callable[..., Path]


def write_tagged_mp3(
    path: Path,
    artist: str = "",
    album: str = "",
    year: str = "",
    disk: str = "",
    track: str = "",
    title: str = "",
    genre: str = "",
    payload: bytes = b"\xff\xfb\x90\x00" * 64,
) -> Path:
    """Write a file with the given ID3 frames followed by a fake audio payload."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(payload)

    tags = ID3()
    frames = [
        (TPE1, artist),
        (TALB, album),
        (TDRC, year),
        (TPOS, disk),
        (TRCK, track),
        (TIT2, title),
        (TCON, genre),
    ]
    for frame_class, value in frames:
        if value:
            tags.add(frame_class(encoding=3, text=value))
    tags.save(path)
    return path


@pytest.fixture
def make_mp3() -> MakeMp3:
    """Fixture that writes tagged MP3 files."""
    return write_tagged_mp3


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove environment overrides of the settings."""
    for name in ("MP3SYNC_SOURCE", "MP3SYNC_DESTINATION", "MP3SYNC_LOG_DIR"):
        monkeypatch.delenv(name, raising=False)


class FakeTagReader:
    """Tag reader returning tags by file name, failing for unknown files."""

    def __init__(self, tags: dict[str, Tag] | None = None) -> None:
        self.tags = dict(tags or {})
        self.calls: list[str] = []

    def __call__(self, path: str) -> Tag:
        self.calls.append(path)
        name = Path(path).name
        if name not in self.tags:
            raise TagParseError(path, "no tag found")
        return self.tags[name]


@pytest.fixture
def fake_tag_reader() -> Callable[[dict[str, Tag]], TagReader]:
    """Fixture building fake tag readers."""
    return FakeTagReader


class ScriptedPrompter:
    """Prompter answering questions by prefix and recording what was asked."""

    def __init__(self, answers: dict[str, str] | None = None, default: str = "") -> None:
        self.answers = dict(answers or {})
        self.default = default
        self.questions: list[str] = []

    def __call__(self, question: str) -> str:
        self.questions.append(question)
        for prefix, answer in self.answers.items():
            if question.startswith(prefix):
                return answer
        return self.default


@pytest.fixture
def prompter() -> type[ScriptedPrompter]:
    """Fixture giving access to the scripted prompter class."""
    return ScriptedPrompter

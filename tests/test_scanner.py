"""Unit tests for core scanner module."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from mp3sync.core import scanner
from mp3sync.core.filters import SyncFilter
from mp3sync.core.models import ScanError
from mp3sync.core.scanner import scan_tree, scan_trees, should_ignore_file


def _touch(path: Path, size: int = 10) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    return path


@pytest.fixture
def music_tree(tmp_path: Path) -> Path:
    """Create a small source tree."""
    root = tmp_path / "music"
    _touch(root / "queen" / "b.mp3", 20)
    _touch(root / "queen" / "a.mp3", 10)
    _touch(root / "abba" / "arrival" / "c.mp3", 30)
    _touch(root / "abba" / "cover.jpg", 5)
    _touch(root / "abba" / ".DS_Store", 1)
    _touch(root / "top.mp3", 40)
    (root / "empty").mkdir()
    return root


class TestShouldIgnoreFile:
    """Tests for should_ignore_file."""

    @pytest.mark.parametrize("name", [".DS_Store", "Thumbs.db", ".hidden.mp3", "song.mp3.part"])
    def test_ignored(self, name: str) -> None:
        assert should_ignore_file(name) is True

    @pytest.mark.parametrize("name", ["song.mp3", "cover.jpg", "Song.MP3"])
    def test_not_ignored(self, name: str) -> None:
        assert should_ignore_file(name) is False


class TestScanTree:
    """Tests for scan_tree."""

    def test_lists_files_recursively_in_sorted_order(self, music_tree: Path) -> None:
        """Test that only files are listed, in stable sorted order."""
        entries = scan_tree(music_tree)

        relative = [os.path.relpath(e.path, music_tree) for e in entries]
        assert relative == [
            "top.mp3",
            os.path.join("abba", ".DS_Store"),
            os.path.join("abba", "cover.jpg"),
            os.path.join("abba", "arrival", "c.mp3"),
            os.path.join("queen", "a.mp3"),
            os.path.join("queen", "b.mp3"),
        ]
        assert all(not e.is_dir for e in entries)

    def test_entry_metadata(self, music_tree: Path) -> None:
        """Test that entries carry size and modification time."""
        entries = {os.path.basename(e.path): e for e in scan_tree(music_tree)}

        assert entries["c.mp3"].size == 30
        assert entries["top.mp3"].mod_time == (music_tree / "top.mp3").stat().st_mtime

    def test_filter_skips_extensions_and_system_files(self, music_tree: Path) -> None:
        """Test that a filter restricts the listing to allowed extensions."""
        entries = scan_tree(music_tree, SyncFilter())

        names = sorted(os.path.basename(e.path) for e in entries)
        assert names == ["a.mp3", "b.mp3", "c.mp3", "top.mp3"]

    def test_empty_tree(self, tmp_path: Path) -> None:
        """Test scanning an empty directory."""
        assert scan_tree(tmp_path) == []

    def test_missing_root(self, tmp_path: Path) -> None:
        """Test that a missing root raises ScanError."""
        with pytest.raises(ScanError, match="path does not exist"):
            scan_tree(tmp_path / "missing")

    def test_root_is_a_file(self, tmp_path: Path) -> None:
        """Test that a file as root raises ScanError."""
        file = _touch(tmp_path / "song.mp3")
        with pytest.raises(ScanError):
            scan_tree(file)

    def test_traversal_error(self, music_tree: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that an I/O error partway through fails the whole scan."""

        def failing_walk(top, onerror=None):
            yield str(top), ["queen"], ["top.mp3"]
            onerror(PermissionError(13, "Permission denied", str(Path(top) / "queen")))

        monkeypatch.setattr(scanner.os, "walk", failing_walk)

        with pytest.raises(ScanError, match="failed to scan"):
            scan_tree(music_tree)

    def test_stat_error(self, music_tree: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that a file vanishing during the scan fails the scan."""

        def failing_from_path(file_path):
            raise FileNotFoundError(2, "No such file or directory", file_path)

        monkeypatch.setattr(scanner.FileEntry, "from_path", failing_from_path)

        with pytest.raises(ScanError):
            scan_tree(music_tree)


class TestScanTrees:
    """Tests for the concurrent scan of source and destination."""

    def test_concurrent_matches_sequential(self, music_tree: Path, tmp_path: Path) -> None:
        """Test that the concurrent scan gives the same listings as two sequential scans."""
        destination = tmp_path / "player"
        _touch(destination / "A" / "ABBA - Waterloo.mp3", 12)
        _touch(destination / "Q" / "Queen - Flash.mp3", 14)
        _touch(destination / "Q" / "notes.txt", 3)

        source_listing, destination_listing = scan_trees(music_tree, destination, SyncFilter())

        assert set(source_listing) == set(scan_tree(music_tree, SyncFilter()))
        assert set(destination_listing) == set(scan_tree(destination))

    def test_destination_is_not_filtered(self, music_tree: Path, tmp_path: Path) -> None:
        """Test that the filter only applies to the source."""
        destination = tmp_path / "player"
        _touch(destination / "Q" / "notes.txt", 3)

        _, destination_listing = scan_trees(music_tree, destination, SyncFilter())

        assert [os.path.basename(e.path) for e in destination_listing] == ["notes.txt"]

    def test_destination_error(self, music_tree: Path, tmp_path: Path) -> None:
        """Test that a missing destination fails the scan."""
        with pytest.raises(ScanError, match="player"):
            scan_trees(music_tree, tmp_path / "player")

    def test_source_error_wins(self, tmp_path: Path) -> None:
        """Test that the source error is raised when both scans fail."""
        with pytest.raises(ScanError, match="music"):
            scan_trees(tmp_path / "music", tmp_path / "player")

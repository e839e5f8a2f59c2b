"""Tests for the command line entrypoint."""

from __future__ import annotations

import io
import json
from collections import namedtuple
from pathlib import Path

import pytest
from rich.console import Console

from mp3sync import app
from mp3sync.core import diskspace
from mp3sync.core.logger import LogLevel

DANCING_QUEEN = Path("A") / "ABBA - Arrival (1976) - 01 - Dancing Queen.mp3"


@pytest.fixture(autouse=True)
def logging_levels(monkeypatch: pytest.MonkeyPatch) -> list[LogLevel]:
    """Record the configured log level instead of installing handlers."""
    levels: list[LogLevel] = []
    monkeypatch.setattr(app, "configure_logging", lambda level: levels.append(level))
    return levels


@pytest.fixture
def console() -> Console:
    """Console writing into a buffer."""
    return Console(file=io.StringIO(), width=200, highlight=False, color_system=None)


def _output(console: Console) -> str:
    return console.file.getvalue()


@pytest.fixture
def config(tmp_path: Path, make_mp3) -> Path:
    """Write a config file pointing at a library with one tagged file."""
    make_mp3(
        tmp_path / "music" / "abba" / "arrival.mp3",
        artist="ABBA",
        album="Arrival",
        year="1976",
        track="1",
        title="Dancing Queen",
    )
    (tmp_path / "player").mkdir()
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "source": str(tmp_path / "music"),
                "destination": str(tmp_path / "player"),
                "log_dir": str(tmp_path / "logs"),
            }
        ),
        encoding="utf-8",
    )
    return path


def _answers(monkeypatch: pytest.MonkeyPatch, *answers: str) -> list[str]:
    asked: list[str] = []
    remaining = list(answers)

    def fake_input(prompt: str = "") -> str:
        asked.append(prompt)
        return remaining.pop(0)

    monkeypatch.setattr("builtins.input", fake_input)
    return asked


class TestParser:
    """Tests for the argument parser."""

    def test_defaults(self) -> None:
        args = app.build_parser().parse_args([])
        assert args.config == "config.json"
        assert args.yes is False
        assert args.dry_run is False
        assert args.log_dir is None
        assert args.verbose == 0

    def test_options(self) -> None:
        args = app.build_parser().parse_args(
            ["-c", "my.json", "-y", "--dry-run", "--log-dir", "/tmp/logs", "-vv"]
        )
        assert args.config == "my.json"
        assert args.yes is True
        assert args.dry_run is True
        assert args.log_dir == "/tmp/logs"
        assert args.verbose == 2


class TestMain:
    """Tests for main."""

    def test_sync_with_yes(self, config: Path, console: Console) -> None:
        """Test a complete non-interactive run."""
        code = app.main(["-c", str(config), "--yes"], console)

        assert code == app.EXIT_OK
        assert (config.parent / "player" / DANCING_QUEEN).exists()
        output = _output(console)
        assert "MP3 sync started ..." in output
        assert f"Source: {config.parent / 'music'}" in output
        assert "copy: " in output
        assert "Free Disk Space:" in output
        assert "1 files synced" in output
        assert "MP3 sync finished successful!" in output

    def test_interactive_answers(
        self, config: Path, console: Console, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that the questions are asked on the console."""
        asked = _answers(monkeypatch, "n", "y")

        code = app.main(["-c", str(config)], console)

        assert code == app.EXIT_OK
        assert asked == ["", ""]
        output = _output(console)
        assert "Show files to sync? [Y/n]" in output
        assert "Start Sync? [Y/n]" in output
        assert "copy: " not in output

    def test_abort(self, config: Path, console: Console, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that declining the start question exits with the abort code."""
        _answers(monkeypatch, "", "n")

        code = app.main(["-c", str(config)], console)

        assert code == app.EXIT_ABORTED
        assert "MP3 sync aborted by user" in _output(console)
        assert not (config.parent / "player" / DANCING_QUEEN).exists()

    def test_end_of_input_answers_yes(
        self, config: Path, console: Console, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that a closed stdin is treated as an empty answer."""

        def closed_input(prompt: str = "") -> str:
            raise EOFError

        monkeypatch.setattr("builtins.input", closed_input)

        assert app.main(["-c", str(config)], console) == app.EXIT_OK

    def test_dry_run(self, config: Path, console: Console) -> None:
        """Test that a dry run reports the plan without copying."""
        code = app.main(["-c", str(config), "-y", "--dry-run"], console)

        assert code == app.EXIT_OK
        assert "Dry run finished, 1 files would be synced" in _output(console)
        assert not (config.parent / "player" / DANCING_QUEEN).exists()

    def test_nothing_to_sync(self, config: Path, console: Console) -> None:
        """Test the report of an in-sync destination."""
        app.main(["-c", str(config), "-y"], Console(file=io.StringIO()))

        code = app.main(["-c", str(config), "-y"], console)

        assert code == app.EXIT_OK
        assert "Nothing to sync, 1 files already in sync" in _output(console)

    def test_missing_config(self, tmp_path: Path, console: Console) -> None:
        """Test that a missing config file is fatal."""
        code = app.main(["-c", str(tmp_path / "missing.json")], console)

        assert code == app.EXIT_FAILED
        assert "failed to load config" in _output(console)

    def test_fatal_error(
        self, config: Path, console: Console, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that insufficient disk space is reported as fatal."""
        usage = namedtuple("usage", ["total", "used", "free"])
        monkeypatch.setattr(diskspace.shutil, "disk_usage", lambda path: usage(10, 9, 1))

        code = app.main(["-c", str(config), "-y"], console)

        assert code == app.EXIT_FAILED
        assert "MP3 sync finished with error: not enough disk space" in _output(console)

    def test_file_errors(self, config: Path, console: Console, tmp_path: Path) -> None:
        """Test that per-file errors give their own exit code and log file."""
        broken = config.parent / "music" / "broken" / "untagged.mp3"
        broken.parent.mkdir()
        broken.write_bytes(b"\x00" * 64)
        log_dir = tmp_path / "other-logs"

        code = app.main(["-c", str(config), "-y", "--log-dir", str(log_dir)], console)

        assert code == app.EXIT_FILE_ERRORS
        assert (config.parent / "player" / DANCING_QUEEN).exists()
        output = _output(console)
        assert "found 1 errors" in output
        assert "see log for more details" in output
        assert len(list(log_dir.iterdir())) == 1

    @pytest.mark.parametrize(
        "flags,level",
        [([], LogLevel.WARNING), (["-v"], LogLevel.INFO), (["-vv"], LogLevel.DEBUG)],
    )
    def test_verbosity(
        self, config: Path, console: Console, logging_levels: list[LogLevel], flags, level
    ) -> None:
        """Test that -v raises the log level."""
        app.main(["-c", str(config), "-y", "--dry-run", *flags], console)
        assert logging_levels == [level]

"""Terminal presentation for mp3sync using Rich.

ConsolePresenter turns runner events into colored output and asks the
confirmation questions. The console is passed in, never global.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeElapsedColumn,
)

from mp3sync.core.diskspace import format_size
from mp3sync.core.runner import SyncEvent, SyncEventType, SyncPhase

STYLE_TITLE = "bold green"
STYLE_DESCRIPTION = "green"
STYLE_INFO = "yellow"
STYLE_LIST = "bright_blue"
STYLE_ERROR = "red"


class ConsolePresenter:
    """Renders sync events and prompts on a Rich console."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(highlight=False)
        self._progress: Progress | None = None
        self._task_id: int | None = None

    def title(self, message: str) -> None:
        """Print a headline."""
        self.console.print(message, style=STYLE_TITLE)

    def description(self, label: str, value: str) -> None:
        """Print a labelled value, e.g. the configured source path."""
        self.console.print(
            f"[{STYLE_DESCRIPTION}]{label}:[/] [{STYLE_INFO}]{escape(value)}[/]", markup=True
        )

    def error(self, message: str) -> None:
        """Print an error message literally, without markup."""
        self.console.print(message, style=STYLE_ERROR, markup=False)

    def ask(self, question: str) -> str:
        """Ask a question and return the raw answer (empty on EOF)."""
        self._stop_progress()
        try:
            return self.console.input(escape(question))
        except EOFError:
            return ""

    def handle_event(self, event: SyncEvent) -> None:
        """Render a single runner event."""
        data = event.data
        event_type = event.event_type

        if event_type == SyncEventType.PHASE_STARTED:
            if data["phase"] == SyncPhase.SYNC.value:
                self._start_progress(data["message"])
            else:
                self.console.print(data["message"], style=STYLE_DESCRIPTION, markup=False)

        elif event_type == SyncEventType.PHASE_COMPLETED:
            self._stop_progress()
            self.console.print(
                f"{data['message']} in {data['duration']:.2f}s",
                style=STYLE_DESCRIPTION,
                markup=False,
            )
            self.console.print()

        elif event_type == SyncEventType.FILE_PROCESSED:
            if self._progress is not None and self._task_id is not None:
                self._progress.update(
                    self._task_id, completed=data["index"], total=data["total"]
                )

        elif event_type == SyncEventType.ERRORS_FOUND:
            self._stop_progress()
            self.error(f"found {data['count']} errors")
            self.error(f"logged errors in file {data['log_file']}")

        elif event_type == SyncEventType.ERROR_LIST:
            for message in data["errors"]:
                self.error(message)

        elif event_type == SyncEventType.DIFF_LIST:
            for item in data["items"]:
                action = "overwrite" if item["overwrite"] else "copy"
                self.console.print(
                    f"{action}: {item['source']} -> {item['target']}",
                    style=STYLE_LIST,
                    markup=False,
                )
            self.console.print()

        elif event_type == SyncEventType.DISK_SPACE:
            self.console.print(f"Free Disk Space: {format_size(data['free'])}", style=STYLE_LIST)
            self.console.print(
                f"Disk Space Needed: {format_size(data['needed'])}", style=STYLE_LIST
            )
            self.console.print(f"Disk Space Left: {format_size(data['left'])}", style=STYLE_LIST)
            self.console.print()

        elif event_type == SyncEventType.NOTHING_TO_SYNC:
            self.console.print(
                f"Nothing to sync, {data['in_sync']} files already in sync",
                style=STYLE_INFO,
            )

    def _start_progress(self, message: str) -> None:
        self._stop_progress()
        self._progress = Progress(
            TextColumn("[green]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )
        self._progress.start()
        self._task_id = self._progress.add_task(message, total=None)

    def _stop_progress(self) -> None:
        if self._progress is not None:
            self._progress.stop()
        self._progress = None
        self._task_id = None

    def close(self) -> None:
        """Stop any running progress display."""
        self._stop_progress()

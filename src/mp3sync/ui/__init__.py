"""Terminal presentation for mp3sync."""

from mp3sync.ui.console import ConsolePresenter

__all__ = ["ConsolePresenter"]

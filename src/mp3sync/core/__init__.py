"""Core logic for mp3sync."""

from mp3sync.core.runner import (
    SyncEvent,
    SyncEventType,
    SyncPhase,
    SyncResult,
    SyncRunner,
)

__all__ = [
    "SyncEvent",
    "SyncEventType",
    "SyncPhase",
    "SyncResult",
    "SyncRunner",
]

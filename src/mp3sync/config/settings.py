"""Configuration for mp3sync."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mp3sync.core.filters import SyncFilter
from mp3sync.core.logger import DEFAULT_LOG_DIR
from mp3sync.core.models import SyncError

DEFAULT_CONFIG_FILE = "config.json"


class ConfigError(SyncError):
    """Raised when the configuration cannot be loaded or is invalid."""

    pass


def normalize_root(path: str) -> str:
    """Normalize a root path so scanned and computed paths compare exactly."""
    if not path:
        return ""
    return os.path.normpath(os.path.expanduser(path))


@dataclass
class Settings:
    """Main mp3sync configuration."""

    source: str = ""
    destination: str = ""
    filter: SyncFilter = field(default_factory=SyncFilter)
    log_dir: str = ""

    def __post_init__(self) -> None:
        """Apply environment variable overrides and normalize paths."""
        source_env = os.getenv("MP3SYNC_SOURCE")
        if source_env:
            self.source = source_env

        destination_env = os.getenv("MP3SYNC_DESTINATION")
        if destination_env:
            self.destination = destination_env

        log_dir_env = os.getenv("MP3SYNC_LOG_DIR")
        if log_dir_env:
            self.log_dir = log_dir_env
        if not self.log_dir:
            self.log_dir = DEFAULT_LOG_DIR

        self.source = normalize_root(self.source)
        self.destination = normalize_root(self.destination)

    def validate(self) -> None:
        """Validate the settings.

        Raises:
            ConfigError: If source or destination is missing or they overlap.
        """
        if not self.source:
            raise ConfigError("source path is not configured")
        if not self.destination:
            raise ConfigError("destination path is not configured")

        source = os.path.abspath(self.source)
        destination = os.path.abspath(self.destination)
        if source == destination:
            raise ConfigError("source and destination must be different paths")
        if os.path.commonpath([source, destination]) in (source, destination):
            raise ConfigError(
                f"source and destination must not be nested: {source}, {destination}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "source": self.source,
            "destination": self.destination,
            "log_dir": self.log_dir,
            "filter": self.filter.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Deserialize from dictionary.

        Raises:
            ConfigError: If the filter section is invalid.
        """
        try:
            sync_filter = SyncFilter.from_dict(data.get("filter"))
        except (ValueError, TypeError, AttributeError) as e:
            raise ConfigError(f"invalid filter: {e}") from e

        return cls(
            source=str(data.get("source", "")),
            destination=str(data.get("destination", "")),
            filter=sync_filter,
            log_dir=str(data.get("log_dir", "")),
        )


def load_settings(config_path: str | Path = DEFAULT_CONFIG_FILE) -> Settings:
    """Load and validate the settings from a JSON file.

    Args:
        config_path: Path to the configuration file.

    Returns:
        Validated Settings.

    Raises:
        ConfigError: If the file cannot be read, is not valid JSON, or the
            resulting settings are invalid.
    """
    path = Path(config_path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"config file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"config file {path} is not valid JSON: {e}") from e
    except OSError as e:
        raise ConfigError(f"failed to read config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a JSON object")

    settings = Settings.from_dict(data)
    settings.validate()
    return settings

"""Configuration module for mp3sync."""

from mp3sync.config.settings import ConfigError, Settings, load_settings

__all__ = ["ConfigError", "Settings", "load_settings"]

"""mp3sync: sync an audio library into a tag-named destination tree."""

__version__ = "0.1.0"

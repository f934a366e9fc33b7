"""Exceptions raised by the map compare tool."""

from pathlib import Path


class MapCompareError(Exception):
    """Base exception for map compare operations."""

    pass


class MapFileReadError(MapCompareError):
    """A map file could not be read from disk."""

    def __init__(self, path: str | Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot read map file {self.path}: {reason}")


class ConfigError(MapCompareError):
    """Invalid map compare configuration."""

    pass

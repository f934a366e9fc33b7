"""
Configuration for module summary parsing and reporting.
"""

import json
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from src.shared_utilities import OutputFormat, get_logger

from .exceptions import ConfigError

ENV_PREFIX = "MAP_COMPARE_"

DEFAULT_ARCHIVE_SUFFIXES = (".a", ".lib")
DEFAULT_AGGREGATE_LABELS = ("Total:", "Grand Total:", "Gaps", "Linker created")


@dataclass(frozen=True)
class MapCompareConfig:
    """Settings shared by the parser, the differ front end and the reports."""

    # Group headers ending in one of these name an archive; others are
    # object directories and leave archive_path empty.
    archive_suffixes: tuple[str, ...] = DEFAULT_ARCHIVE_SUFFIXES
    archive_separator: str = ":"
    aggregate_labels: tuple[str, ...] = DEFAULT_AGGREGATE_LABELS
    output_format: str = OutputFormat.TABLE
    show_unchanged: bool = False
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        if not self.archive_separator or self.archive_separator.isspace():
            raise ConfigError("archive_separator must be a non-blank string")
        if self.output_format not in OutputFormat.choices():
            raise ConfigError(
                f"Unsupported output format: {self.output_format} "
                f"(expected one of {', '.join(OutputFormat.choices())})"
            )

    def is_archive(self, group_name: str) -> bool:
        """Whether a group header names a library archive."""
        lowered = group_name.lower()
        return any(lowered.endswith(suffix.lower()) for suffix in self.archive_suffixes)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MapCompareConfig":
        """Build a config from plain values, keeping unknown keys in extra."""
        known = {f.name for f in fields(cls)} - {"extra"}
        kwargs: dict[str, Any] = {}
        extra: dict[str, Any] = {}

        for key, value in data.items():
            if key not in known:
                extra[key] = value
            elif key in ("archive_suffixes", "aggregate_labels"):
                if isinstance(value, str):
                    value = [part.strip() for part in value.split(",") if part.strip()]
                if not isinstance(value, list | tuple):
                    raise ConfigError(f"{key} must be a list of strings")
                kwargs[key] = tuple(str(v) for v in value)
            elif key == "show_unchanged":
                kwargs[key] = _coerce_bool(key, value)
            else:
                kwargs[key] = str(value)

        return cls(extra=extra, **kwargs)

    @classmethod
    def from_file(cls, path: str | Path) -> "MapCompareConfig":
        """Load configuration from a JSON file."""
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in config file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a JSON object")

        config = cls.from_dict(data)
        if config.extra:
            get_logger(__name__).warning(
                "Ignoring unknown config keys",
                path=str(path),
                keys=sorted(config.extra),
            )
        return config

    @classmethod
    def from_env(
        cls, environ: dict[str, str] | None = None, base: "MapCompareConfig | None" = None
    ) -> "MapCompareConfig":
        """Overlay MAP_COMPARE_* environment variables on a base config."""
        environ = dict(os.environ) if environ is None else environ
        base = base or cls()

        overrides = {
            key[len(ENV_PREFIX) :].lower(): value
            for key, value in environ.items()
            if key.startswith(ENV_PREFIX)
        }
        if not overrides:
            return base

        parsed = cls.from_dict(overrides)
        known = {f.name for f in fields(cls)} - {"extra"}
        changed = {name: getattr(parsed, name) for name in overrides if name in known}
        return replace(base, **changed)


def _coerce_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off", ""):
        return False
    raise ConfigError(f"{key} must be a boolean, got {value!r}")

"""Module summary comparison for IAR linker map files."""

from .config import MapCompareConfig
from .data_models import (
    ChangeType,
    DiffEntry,
    DiffResult,
    ModuleRecord,
    ModuleSummaryTable,
    ParseWarning,
    SizeDelta,
    WarningKind,
)
from .differ import ModuleSummaryDiffer, diff
from .exceptions import ConfigError, MapCompareError, MapFileReadError
from .parser import ModuleSummaryParser, parse

__all__ = [
    "ChangeType",
    "ConfigError",
    "DiffEntry",
    "DiffResult",
    "MapCompareConfig",
    "MapCompareError",
    "MapFileReadError",
    "ModuleRecord",
    "ModuleSummaryDiffer",
    "ModuleSummaryParser",
    "ModuleSummaryTable",
    "ParseWarning",
    "SizeDelta",
    "WarningKind",
    "diff",
    "parse",
]

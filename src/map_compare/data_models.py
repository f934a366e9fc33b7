"""Data models for module summary tables and their comparison results."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

IdentityKey = tuple[str, str]

# Placeholder rendered for a size column the map file does not carry
MISSING_SIZE = "------"


class WarningKind(Enum):
    """Recoverable problems met while parsing a map file."""

    MALFORMED_LINE = "malformed_line"
    SECTION_NOT_FOUND = "section_not_found"


class ChangeType(Enum):
    """Classification of one module across two map files."""

    ADDED = "added"
    REMOVED = "removed"
    UNCHANGED = "unchanged"
    CHANGED = "changed"


def _optional_sum(*values: int | None) -> int | None:
    present = [v for v in values if v is not None]
    return sum(present) if present else None


def _optional_diff(left: int | None, right: int | None) -> int | None:
    """Right minus left, absent counted as zero; None when neither is set."""
    if left is None and right is None:
        return None
    return (right or 0) - (left or 0)


def format_size(value: int | None, signed: bool = False) -> str:
    """Render a size column, using the dashed placeholder when absent."""
    if value is None:
        return MISSING_SIZE
    return f"{value:+d}" if signed else str(value)


@dataclass(frozen=True)
class ModuleRecord:
    """One row of a module summary table."""

    archive_path: str
    object_name: str
    code_size: int = 0
    read_only_data_size: int | None = None
    read_write_data_size: int | None = None

    def __post_init__(self):
        if not self.object_name:
            raise ValueError("ModuleRecord requires a non-empty object_name")
        for name in ("code_size", "read_only_data_size", "read_write_data_size"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} must not be negative, got {value}")

    @property
    def identity_key(self) -> IdentityKey:
        """The (archive_path, object_name) pair used to match modules."""
        return (self.archive_path, self.object_name)

    @property
    def display_name(self) -> str:
        """Object name, qualified by its archive when it has one."""
        if self.archive_path:
            return f"{self.archive_path} : {self.object_name}"
        return self.object_name

    @property
    def total(self) -> int:
        """Sum of every size column present on this record."""
        return (
            self.code_size
            + (self.read_only_data_size or 0)
            + (self.read_write_data_size or 0)
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "archive_path": self.archive_path,
            "object_name": self.object_name,
            "code_size": self.code_size,
            "read_only_data_size": self.read_only_data_size,
            "read_write_data_size": self.read_write_data_size,
        }


@dataclass(frozen=True)
class ParseWarning:
    """A line (or a whole section) the parser had to skip."""

    kind: WarningKind
    message: str
    line_number: int | None = None
    raw_line: str = ""

    def __str__(self) -> str:
        if self.line_number is None:
            return self.message
        return f"line {self.line_number}: {self.message}: {self.raw_line.strip()!r}"


@dataclass(frozen=True)
class ModuleSummaryTable:
    """Parsed module summary section of one map file."""

    records: tuple[ModuleRecord, ...] = ()
    warnings: tuple[ParseWarning, ...] = ()
    groups: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[ModuleRecord]:
        return iter(self.records)

    def by_key(self) -> dict[IdentityKey, list[ModuleRecord]]:
        """Records bucketed by identity key, document order kept per bucket."""
        index: dict[IdentityKey, list[ModuleRecord]] = {}
        for record in self.records:
            index.setdefault(record.identity_key, []).append(record)
        return index


@dataclass(frozen=True)
class SizeDelta:
    """Signed per-column size difference (right minus left).

    Optional columns stay None when neither side of the comparison carried
    them, so "column absent" is distinguishable from "no change".
    """

    code_size: int = 0
    read_only_data_size: int | None = None
    read_write_data_size: int | None = None

    @classmethod
    def between(cls, left: ModuleRecord, right: ModuleRecord) -> "SizeDelta":
        return cls(
            code_size=right.code_size - left.code_size,
            read_only_data_size=_optional_diff(
                left.read_only_data_size, right.read_only_data_size
            ),
            read_write_data_size=_optional_diff(
                left.read_write_data_size, right.read_write_data_size
            ),
        )

    @classmethod
    def of(cls, record: ModuleRecord) -> "SizeDelta":
        """The full sizes of one record; negate it for a removal."""
        return cls(
            code_size=record.code_size,
            read_only_data_size=record.read_only_data_size,
            read_write_data_size=record.read_write_data_size,
        )

    def __add__(self, other: "SizeDelta") -> "SizeDelta":
        return SizeDelta(
            code_size=self.code_size + other.code_size,
            read_only_data_size=_optional_sum(
                self.read_only_data_size, other.read_only_data_size
            ),
            read_write_data_size=_optional_sum(
                self.read_write_data_size, other.read_write_data_size
            ),
        )

    def __neg__(self) -> "SizeDelta":
        return SizeDelta(
            code_size=-self.code_size,
            read_only_data_size=(
                None
                if self.read_only_data_size is None
                else -self.read_only_data_size
            ),
            read_write_data_size=(
                None
                if self.read_write_data_size is None
                else -self.read_write_data_size
            ),
        )

    @property
    def is_zero(self) -> bool:
        return not (
            self.code_size or self.read_only_data_size or self.read_write_data_size
        )

    @property
    def total(self) -> int:
        return (
            self.code_size
            + (self.read_only_data_size or 0)
            + (self.read_write_data_size or 0)
        )

    def to_dict(self) -> dict[str, int | None]:
        return {
            "code_size": self.code_size,
            "read_only_data_size": self.read_only_data_size,
            "read_write_data_size": self.read_write_data_size,
        }


@dataclass(frozen=True)
class DiffEntry:
    """Comparison outcome for one identity key (or one positional pair)."""

    change_type: ChangeType
    left: ModuleRecord | None = None
    right: ModuleRecord | None = None
    delta: SizeDelta = field(default_factory=SizeDelta)

    def __post_init__(self):
        if self.left is None and self.right is None:
            raise ValueError("DiffEntry requires a left or a right record")

    @property
    def record(self) -> ModuleRecord:
        """The record describing this module, preferring the right side."""
        if self.right is not None:
            return self.right
        return self.left  # type: ignore[return-value]

    @property
    def identity_key(self) -> IdentityKey:
        return self.record.identity_key

    @property
    def display_name(self) -> str:
        return self.record.display_name


@dataclass
class DiffStatistics:
    """Summary counts for a diff, used by the report formatters."""

    left_total: int = 0
    right_total: int = 0
    total_added: int = 0
    total_removed: int = 0
    total_changed: int = 0
    total_unchanged: int = 0
    totals: SizeDelta = field(default_factory=SizeDelta)
    top_growth: list[tuple[str, int]] = field(default_factory=list)
    top_shrink: list[tuple[str, int]] = field(default_factory=list)

    @property
    def total_differences(self) -> int:
        return self.total_added + self.total_removed + self.total_changed


@dataclass(frozen=True)
class DiffResult:
    """Ordered comparison of two module summary tables."""

    entries: tuple[DiffEntry, ...] = ()
    totals: SizeDelta = field(default_factory=SizeDelta)
    groups_only_in_left: tuple[str, ...] = ()
    groups_only_in_right: tuple[str, ...] = ()

    def _of_type(self, change_type: ChangeType) -> list[DiffEntry]:
        return [entry for entry in self.entries if entry.change_type == change_type]

    @property
    def added(self) -> list[DiffEntry]:
        return self._of_type(ChangeType.ADDED)

    @property
    def removed(self) -> list[DiffEntry]:
        return self._of_type(ChangeType.REMOVED)

    @property
    def changed(self) -> list[DiffEntry]:
        return self._of_type(ChangeType.CHANGED)

    @property
    def unchanged(self) -> list[DiffEntry]:
        return self._of_type(ChangeType.UNCHANGED)

    @property
    def has_changes(self) -> bool:
        """Check if any module was added, removed or resized."""
        return any(
            entry.change_type != ChangeType.UNCHANGED for entry in self.entries
        )

    def get_statistics(self, top: int = 5) -> DiffStatistics:
        """Calculate summary statistics for the comparison."""
        stats = DiffStatistics(totals=self.totals)

        for entry in self.entries:
            if entry.left is not None:
                stats.left_total += 1
            if entry.right is not None:
                stats.right_total += 1

        stats.total_added = len(self.added)
        stats.total_removed = len(self.removed)
        stats.total_changed = len(self.changed)
        stats.total_unchanged = len(self.unchanged)

        movers = [
            (entry.display_name, entry.delta.total)
            for entry in self.entries
            if entry.change_type != ChangeType.UNCHANGED and entry.delta.total
        ]
        stats.top_growth = sorted(
            (m for m in movers if m[1] > 0), key=lambda x: x[1], reverse=True
        )[:top]
        stats.top_shrink = sorted((m for m in movers if m[1] < 0), key=lambda x: x[1])[
            :top
        ]

        return stats

"""Comparison of two parsed module summary tables."""

from src.shared_utilities import get_logger

from .data_models import (
    ChangeType,
    DiffEntry,
    DiffResult,
    IdentityKey,
    ModuleRecord,
    ModuleSummaryTable,
    SizeDelta,
)

logger = get_logger(__name__)


def _first_appearance_order(table: ModuleSummaryTable) -> list[IdentityKey]:
    seen: dict[IdentityKey, None] = {}
    for record in table.records:
        seen.setdefault(record.identity_key, None)
    return list(seen)


class ModuleSummaryDiffer:
    """Matches modules across two tables and classifies the differences."""

    def diff(self, left: ModuleSummaryTable, right: ModuleSummaryTable) -> DiffResult:
        """Compare two module summary tables.

        Records sharing an identity key are paired positionally within their
        bucket; whatever is left over on one side becomes REMOVED or ADDED.

        Args:
            left: The baseline table
            right: The table compared against the baseline

        Returns:
            DiffResult ordered by left-table key order, then right-only keys
        """
        left_index = left.by_key()
        right_index = right.by_key()

        entries: list[DiffEntry] = []
        for key in _first_appearance_order(left):
            entries.extend(
                self._compare_bucket(left_index[key], right_index.get(key, []))
            )
        for key in _first_appearance_order(right):
            if key not in left_index:
                entries.extend(self._compare_bucket([], right_index[key]))

        totals = SizeDelta()
        for entry in entries:
            if entry.change_type != ChangeType.UNCHANGED:
                totals = totals + entry.delta

        left_groups = set(left.groups)
        right_groups = set(right.groups)

        result = DiffResult(
            entries=tuple(entries),
            totals=totals,
            groups_only_in_left=tuple(sorted(left_groups - right_groups)),
            groups_only_in_right=tuple(sorted(right_groups - left_groups)),
        )

        stats = result.get_statistics()
        logger.info(
            "Comparison completed",
            added=stats.total_added,
            removed=stats.total_removed,
            changed=stats.total_changed,
            unchanged=stats.total_unchanged,
            code_delta=totals.code_size,
        )
        return result

    def _compare_bucket(
        self, left: list[ModuleRecord], right: list[ModuleRecord]
    ) -> list[DiffEntry]:
        entries = [
            self._compare_pair(left_record, right_record)
            for left_record, right_record in zip(left, right, strict=False)
        ]
        paired = min(len(left), len(right))

        for record in left[paired:]:
            entries.append(
                DiffEntry(
                    change_type=ChangeType.REMOVED,
                    left=record,
                    delta=-SizeDelta.of(record),
                )
            )
        for record in right[paired:]:
            entries.append(
                DiffEntry(
                    change_type=ChangeType.ADDED,
                    right=record,
                    delta=SizeDelta.of(record),
                )
            )
        return entries

    def _compare_pair(self, left: ModuleRecord, right: ModuleRecord) -> DiffEntry:
        delta = SizeDelta.between(left, right)
        change_type = ChangeType.UNCHANGED if delta.is_zero else ChangeType.CHANGED
        return DiffEntry(change_type=change_type, left=left, right=right, delta=delta)


def diff(left: ModuleSummaryTable, right: ModuleSummaryTable) -> DiffResult:
    """Compare two module summary tables."""
    return ModuleSummaryDiffer().diff(left, right)

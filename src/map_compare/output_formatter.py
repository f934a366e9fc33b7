"""Output formatting for module summary comparison results."""

import csv
import io
from typing import Any

import click

from src.shared_utilities import BaseOutputFormatter, TableFormatter

from .data_models import (
    ChangeType,
    DiffEntry,
    DiffResult,
    DiffStatistics,
    ModuleRecord,
    ParseWarning,
    SizeDelta,
    format_size,
)

SIZE_COLUMNS = (
    ("code_size", "ro code"),
    ("read_only_data_size", "ro data"),
    ("read_write_data_size", "rw data"),
)

CSV_FIELDS = [
    "change_type",
    "archive_path",
    "object_name",
    *(f"left_{name}" for name, _ in SIZE_COLUMNS),
    *(f"right_{name}" for name, _ in SIZE_COLUMNS),
    *(f"delta_{name}" for name, _ in SIZE_COLUMNS),
]


def _sizes(record: ModuleRecord | SizeDelta | None) -> dict[str, int | None] | None:
    if record is None:
        return None
    return {name: getattr(record, name) for name, _ in SIZE_COLUMNS}


def _style_delta(text: str, value: int | None, color: bool) -> str:
    """Colour growth green and shrinkage red."""
    if not color or not value:
        return text
    return click.style(text, fg="green" if value > 0 else "red")


class MapCompareOutputFormatter(BaseOutputFormatter):
    """Formatter for module summary comparison output."""

    def format_output(
        self,
        result: DiffResult,
        format_type: str,
        left_name: str = "left",
        right_name: str = "right",
        warnings: dict[str, list[ParseWarning]] | None = None,
        show_unchanged: bool = False,
        color: bool = False,
    ) -> str:
        """Format the comparison result for output.

        Args:
            result: The comparison result to format
            format_type: The output format type
            left_name: Label for the baseline map file
            right_name: Label for the compared map file
            warnings: Parser warnings keyed by map file label
            show_unchanged: Whether to include unchanged modules
            color: Colour size deltas in the table report

        Returns:
            Formatted string output
        """
        data = self.prepare_data(
            result, left_name, right_name, warnings, show_unchanged
        )
        return self.format(data, format_type, color=color)

    def prepare_data(
        self,
        result: DiffResult,
        left_name: str = "left",
        right_name: str = "right",
        warnings: dict[str, list[ParseWarning]] | None = None,
        show_unchanged: bool = False,
    ) -> dict[str, Any]:
        """Prepare comparison data for formatting."""
        stats = result.get_statistics()

        entries = [
            entry
            for entry in result.entries
            if show_unchanged or entry.change_type != ChangeType.UNCHANGED
        ]

        return {
            "header": f"Module Summary Comparison: {left_name} → {right_name}",
            "metadata": {
                "Left": left_name,
                "Right": right_name,
            },
            "summary": self._build_summary(stats),
            "groups": {
                "only_in_left": list(result.groups_only_in_left),
                "only_in_right": list(result.groups_only_in_right),
            },
            "items": [self._build_item(entry) for entry in entries],
            "statistics": self._build_statistics(stats),
            "warnings": {
                label: [str(w) for w in file_warnings]
                for label, file_warnings in (warnings or {}).items()
                if file_warnings
            },
        }

    def _build_summary(self, stats: DiffStatistics) -> dict[str, Any]:
        return {
            "left_modules": stats.left_total,
            "right_modules": stats.right_total,
            "added": stats.total_added,
            "removed": stats.total_removed,
            "changed": stats.total_changed,
            "unchanged": stats.total_unchanged,
        }

    def _build_item(self, entry: DiffEntry) -> dict[str, Any]:
        record = entry.record
        return {
            "change_type": entry.change_type.value,
            "archive_path": record.archive_path,
            "object_name": record.object_name,
            "left": _sizes(entry.left),
            "right": _sizes(entry.right),
            "delta": _sizes(entry.delta),
        }

    def _build_statistics(self, stats: DiffStatistics) -> dict[str, Any]:
        return {
            "total_delta": stats.totals.to_dict(),
            "top_growth": [
                {"module": name, "delta": delta} for name, delta in stats.top_growth
            ],
            "top_shrink": [
                {"module": name, "delta": delta} for name, delta in stats.top_shrink
            ],
        }

    def _format_table(self, data: dict[str, Any], **kwargs) -> str:
        """Format comparison as a text report.

        Changed modules get three rows: left sizes (L-), right sizes (R-) and
        the delta (D-). Added and removed modules show the sizes of the side
        they exist on. Pass color=True to colour deltas for a terminal.
        """
        color = kwargs.get("color", False)
        lines = [data["header"], "=" * len(data["header"]), ""]

        lines.append("SUMMARY")
        lines.append("-" * 40)
        for key, value in data["summary"].items():
            lines.append(f"{key.replace('_', ' ').title()}: {value}")

        total_delta = data["statistics"]["total_delta"]
        lines.append(
            "Total Delta: "
            + "  ".join(
                f"{label}: "
                + _style_delta(
                    format_size(total_delta[name], signed=True),
                    total_delta[name],
                    color,
                )
                for name, label in SIZE_COLUMNS
            )
        )
        lines.append("")

        groups = data["groups"]
        if groups["only_in_left"] or groups["only_in_right"]:
            lines.append("GROUP DIFFERENCES")
            lines.append("-" * 40)
            for name in groups["only_in_left"]:
                lines.append(f"  L- {name}")
            for name in groups["only_in_right"]:
                lines.append(f"  R- {name}")
            lines.append("")

        if data["items"]:
            lines.append("MODULE CHANGES")
            lines.append("-" * 40)
            headers = ["Change", "Module", "Side"] + [
                label for _, label in SIZE_COLUMNS
            ]
            rows: list[list[str]] = []
            # Data row index to the delta sizes shown on it
            delta_rows: dict[int, dict[str, int | None]] = {}

            for item in data["items"]:
                module = item["object_name"]
                if item["archive_path"]:
                    module = f"{item['archive_path']} : {module}"

                if item["change_type"] == ChangeType.CHANGED.value:
                    sides = [
                        ("L-", item["left"]),
                        ("R-", item["right"]),
                        ("D-", item["delta"]),
                    ]
                elif item["right"] is not None:
                    sides = [("R-", item["right"])]
                else:
                    sides = [("L-", item["left"])]

                for index, (side, sizes) in enumerate(sides):
                    signed = side == "D-"
                    if signed:
                        delta_rows[len(rows)] = sizes
                    rows.append(
                        [
                            item["change_type"].title() if index == 0 else "",
                            module if index == 0 else "",
                            side,
                        ]
                        + [
                            format_size(sizes[name], signed=signed)
                            for name, _ in SIZE_COLUMNS
                        ]
                    )

            size_offset = len(headers) - len(SIZE_COLUMNS)

            def style_cell(row_index: int, column_index: int, text: str) -> str:
                sizes = delta_rows.get(row_index)
                if sizes is None or column_index < size_offset:
                    return text
                name = SIZE_COLUMNS[column_index - size_offset][0]
                return _style_delta(text, sizes[name], color)

            lines.append(
                TableFormatter.create_table(
                    headers,
                    rows,
                    alignment=["left", "left", "left", "right", "right", "right"],
                    cell_style=style_cell if color else None,
                )
            )
            lines.append("")
        else:
            lines.append("No module differences")
            lines.append("")

        if data["warnings"]:
            lines.append("PARSER WARNINGS")
            lines.append("-" * 40)
            for label, file_warnings in data["warnings"].items():
                for warning in file_warnings:
                    lines.append(f"  {label}: {warning}")
            lines.append("")

        return "\n".join(lines)

    def _format_csv(self, data: dict[str, Any], **kwargs) -> str:
        """Format data as CSV with one row per module."""
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=CSV_FIELDS)
        writer.writeheader()

        for item in data["items"]:
            row: dict[str, Any] = {
                "change_type": item["change_type"],
                "archive_path": item["archive_path"],
                "object_name": item["object_name"],
            }
            for side in ("left", "right", "delta"):
                sizes = item[side] or {}
                for name, _ in SIZE_COLUMNS:
                    value = sizes.get(name)
                    row[f"{side}_{name}"] = "" if value is None else value
            writer.writerow(row)

        return output.getvalue()

    def _format_markdown(self, data: dict[str, Any], **kwargs) -> str:
        """Format data as Markdown."""
        lines = [f"# {data['header']}", ""]

        lines.append("## Summary")
        lines.append("")
        for key, value in data["summary"].items():
            lines.append(f"- **{key.replace('_', ' ').title()}**: {value}")
        total_delta = data["statistics"]["total_delta"]
        for name, label in SIZE_COLUMNS:
            lines.append(
                f"- **Total {label} delta**: "
                f"{format_size(total_delta[name], signed=True)}"
            )
        lines.append("")

        if data["items"]:
            lines.append("## Module Changes")
            lines.append("")
            lines.append(
                "| Change | Archive | Object | "
                + " | ".join(label for _, label in SIZE_COLUMNS)
                + " |"
            )
            lines.append("|---|---|---|" + "---:|" * len(SIZE_COLUMNS))
            for item in data["items"]:
                signed = item["change_type"] != ChangeType.ADDED.value
                sizes = " | ".join(
                    format_size(item["delta"][name], signed=signed)
                    for name, _ in SIZE_COLUMNS
                )
                lines.append(
                    f"| {item['change_type'].title()} | {item['archive_path'] or '-'} "
                    f"| {item['object_name']} | {sizes} |"
                )
            lines.append("")

        if data["warnings"]:
            lines.append("## Parser Warnings")
            lines.append("")
            for label, file_warnings in data["warnings"].items():
                for warning in file_warnings:
                    lines.append(f"- `{label}`: {warning}")
            lines.append("")

        return "\n".join(lines)

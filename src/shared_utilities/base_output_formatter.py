"""
Base output formatter for multi-format report generation.

This module provides a base class for output formatting that supports:
- Human-readable formats (table, markdown)
- Machine-readable formats (json, csv, yaml)
- A consistent interface for tool-specific formatters
"""

import json
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml


class OutputFormat:
    """Enumeration of supported output formats."""

    TABLE = "table"
    JSON = "json"
    CSV = "csv"
    YAML = "yaml"
    MARKDOWN = "markdown"

    @classmethod
    def choices(cls) -> list[str]:
        """All format names, in CLI display order."""
        return [cls.TABLE, cls.JSON, cls.CSV, cls.MARKDOWN, cls.YAML]


class BaseOutputFormatter(ABC):
    """
    Abstract base class for all output formatters.

    Provides a consistent interface and common functionality for formatting
    data into various output formats.
    """

    def __init__(self):
        """Initialize the formatter with format handlers."""
        self._format_handlers = {
            OutputFormat.TABLE: self._format_table,
            OutputFormat.JSON: self._format_json,
            OutputFormat.CSV: self._format_csv,
            OutputFormat.YAML: self._format_yaml,
            OutputFormat.MARKDOWN: self._format_markdown,
        }

    def format(
        self, data: dict[str, Any], format_type: str = OutputFormat.TABLE, **kwargs
    ) -> str:
        """
        Format data according to the specified format type.

        Args:
            data: Data to format
            format_type: Output format type
            **kwargs: Additional format-specific options

        Returns:
            Formatted string output
        """
        handler = self._format_handlers.get(format_type)
        if not handler:
            raise ValueError(f"Unsupported format type: {format_type}")

        return handler(data, **kwargs)

    def save(
        self,
        data: dict[str, Any],
        output_path: str | Path,
        format_type: str = OutputFormat.JSON,
        **kwargs,
    ) -> Path:
        """
        Save formatted data to a file.

        Args:
            data: Data to save
            output_path: Path to save the file
            format_type: Output format type
            **kwargs: Additional format-specific options

        Returns:
            The path written
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        content = self.format(data, format_type, **kwargs)
        output_path.write_text(content, encoding="utf-8")
        return output_path

    @abstractmethod
    def _format_table(self, data: dict[str, Any], **kwargs) -> str:
        """Format data as a human-readable table."""
        pass

    @abstractmethod
    def _format_csv(self, data: dict[str, Any], **kwargs) -> str:
        """Format data as CSV."""
        pass

    def _format_json(self, data: dict[str, Any], **kwargs) -> str:
        """Format data as JSON."""
        indent = kwargs.get("indent", 2)
        sort_keys = kwargs.get("sort_keys", False)
        return json.dumps(data, indent=indent, sort_keys=sort_keys, default=str)

    def _format_yaml(self, data: dict[str, Any], **kwargs) -> str:
        """Format data as YAML."""
        return yaml.safe_dump(
            data, default_flow_style=False, sort_keys=False, allow_unicode=True
        )

    def _format_markdown(self, data: dict[str, Any], **kwargs) -> str:
        """Format data as Markdown."""
        # Default implementation - tools should override for better formatting
        lines = [f"# {data.get('title', 'Output')}"]
        lines.append("")

        metadata = data.get("metadata", {})
        if metadata:
            lines.append("## Metadata")
            lines.append("")
            for key, value in metadata.items():
                lines.append(f"- **{key}**: {value}")
            lines.append("")

        lines.append("## Data")
        lines.append("")
        lines.append("```json")
        lines.append(json.dumps(data.get("data", data), indent=2, default=str))
        lines.append("```")

        return "\n".join(lines)


class TableFormatter:
    """Helper class for creating formatted tables."""

    @staticmethod
    def create_table(
        headers: list[str],
        rows: list[list[str]],
        column_widths: list[int] | None = None,
        alignment: str | list[str] = "left",
        cell_style: Callable[[int, int, str], str] | None = None,
    ) -> str:
        """
        Create a formatted text table.

        Args:
            headers: Column headers
            rows: Data rows
            column_widths: Optional fixed column widths
            alignment: Text alignment (left, center, right), either one value
                for every column or one per column
            cell_style: Optional hook called as cell_style(row, column, text)
                on each padded data cell, e.g. to colour it

        Returns:
            Formatted table as string
        """
        if not column_widths:
            column_widths = [len(h) for h in headers]
            for row in rows:
                for i, cell in enumerate(row):
                    column_widths[i] = max(column_widths[i], len(str(cell)))

        if isinstance(alignment, str):
            alignment = [alignment] * len(column_widths)

        symbols = {"center": "^", "right": ">", "left": "<"}
        formats = [
            f"{{:{symbols.get(align, '<')}{width}}}"
            for align, width in zip(alignment, column_widths, strict=False)
        ]

        lines = []

        header_row = " | ".join(
            fmt.format(h) for fmt, h in zip(formats, headers, strict=False)
        )
        lines.append(header_row)
        lines.append("-" * len(header_row))

        for row_index, row in enumerate(rows):
            cells = [
                fmt.format(str(cell)) for fmt, cell in zip(formats, row, strict=False)
            ]
            if cell_style:
                cells = [
                    cell_style(row_index, column_index, text)
                    for column_index, text in enumerate(cells)
                ]
            lines.append(" | ".join(cells))

        return "\n".join(lines)

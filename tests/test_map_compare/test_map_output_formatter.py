"""Tests for map compare output formatter."""

import csv
import json
from io import StringIO

import click
import pytest
import yaml

from src.map_compare.differ import diff
from src.map_compare.output_formatter import CSV_FIELDS, MapCompareOutputFormatter
from src.map_compare.parser import parse


class TestMapCompareOutputFormatter:
    """Test MapCompareOutputFormatter class."""

    @pytest.fixture
    def comparison(self, left_map_text, right_map_text):
        left, _ = parse(left_map_text)
        right, _ = parse(right_map_text)
        return diff(left, right)

    @pytest.fixture
    def formatter(self):
        return MapCompareOutputFormatter()

    def test_prepare_data(self, formatter, comparison):
        data = formatter.prepare_data(comparison, "old.map", "new.map")

        assert data["header"] == "Module Summary Comparison: old.map → new.map"
        assert data["summary"] == {
            "left_modules": 4,
            "right_modules": 5,
            "added": 2,
            "removed": 1,
            "changed": 1,
            "unchanged": 2,
        }
        assert [item["object_name"] for item in data["items"]] == [
            "main.o",
            "memset.o",
            "strlen.o",
            "xfiles.o",
        ]
        assert data["groups"]["only_in_right"] == ["dl7M_tlf.a"]
        assert data["statistics"]["total_delta"] == {
            "code_size": 56,
            "read_only_data_size": -86,
            "read_write_data_size": -16,
        }
        assert data["warnings"] == {}

    def test_prepare_data_show_unchanged(self, formatter, comparison):
        data = formatter.prepare_data(comparison, show_unchanged=True)

        assert len(data["items"]) == 6
        assert {item["change_type"] for item in data["items"]} == {
            "added",
            "removed",
            "changed",
            "unchanged",
        }

    def test_item_sides(self, formatter, comparison):
        data = formatter.prepare_data(comparison)
        removed = next(i for i in data["items"] if i["change_type"] == "removed")

        assert removed["archive_path"] == "rt7M_tl.a"
        assert removed["right"] is None
        assert removed["left"] == {
            "code_size": 0,
            "read_only_data_size": 88,
            "read_write_data_size": 16,
        }
        assert removed["delta"]["read_only_data_size"] == -88

    def test_format_table(self, formatter, comparison):
        output = formatter.format_output(comparison, "table", "old.map", "new.map")

        assert "Module Summary Comparison: old.map → new.map" in output
        assert "SUMMARY" in output
        assert "Added: 2" in output
        assert "R- dl7M_tlf.a" in output
        assert "MODULE CHANGES" in output
        assert "board.o" not in output
        assert "\x1b[" not in output

    def test_format_table_rows_per_side(self, formatter, comparison):
        """Changed modules list left, right and delta; others their own side."""
        output = formatter.format_output(comparison, "table")
        rows = [
            [cell.strip() for cell in line.split("|")]
            for line in output.splitlines()
            if line.count("|") == 5
        ]

        assert rows == [
            ["Change", "Module", "Side", "ro code", "ro data", "rw data"],
            ["Changed", "main.o", "L-", "22", "44", "------"],
            ["", "", "R-", "30", "44", "------"],
            ["", "", "D-", "+8", "+0", "------"],
            ["Removed", "rt7M_tl.a : memset.o", "L-", "0", "88", "16"],
            ["Added", "rt7M_tl.a : strlen.o", "R-", "48", "------", "------"],
            ["Added", "dl7M_tlf.a : xfiles.o", "R-", "0", "2", "------"],
        ]

    def test_format_table_colours_deltas(self, formatter, comparison):
        plain = formatter.format_output(comparison, "table")

        colored = formatter.format_output(comparison, "table", color=True)

        assert click.unstyle(colored) == plain
        delta_row = next(line for line in colored.splitlines() if "D-" in line)
        assert click.style("     +8", fg="green") in delta_row
        assert delta_row.count("\x1b[") == 2
        assert click.style("+56", fg="green") in colored
        assert click.style("-86", fg="red") in colored
        assert click.style("-16", fg="red") in colored

    def test_format_table_without_changes(self, formatter, left_map_text):
        table, _ = parse(left_map_text)

        output = formatter.format_output(diff(table, table), "table")

        assert "No module differences" in output

    def test_format_table_lists_warnings(self, formatter, comparison):
        _, warnings = parse("*** MODULE SUMMARY\n    main.o  ABC\n")

        output = formatter.format_output(
            comparison, "table", warnings={"new.map": warnings}
        )

        assert "PARSER WARNINGS" in output
        assert "new.map: line 2" in output

    def test_format_json(self, formatter, comparison):
        output = formatter.format_output(comparison, "json")

        data = json.loads(output)
        assert data["summary"]["added"] == 2
        assert data["items"][0]["delta"] == {
            "code_size": 8,
            "read_only_data_size": 0,
            "read_write_data_size": None,
        }

    def test_format_csv(self, formatter, comparison):
        output = formatter.format_output(comparison, "csv")

        rows = list(csv.DictReader(StringIO(output)))
        assert list(rows[0].keys()) == CSV_FIELDS
        assert len(rows) == 4
        added = next(r for r in rows if r["object_name"] == "strlen.o")
        assert added["change_type"] == "added"
        assert added["left_code_size"] == ""
        assert added["right_code_size"] == "48"
        assert added["delta_read_only_data_size"] == ""

    def test_format_yaml(self, formatter, comparison):
        output = formatter.format_output(comparison, "yaml")

        data = yaml.safe_load(output)
        assert data["summary"]["removed"] == 1
        assert data["groups"]["only_in_right"] == ["dl7M_tlf.a"]

    def test_format_markdown(self, formatter, comparison):
        output = formatter.format_output(comparison, "markdown", "old.map", "new.map")

        assert output.startswith("# Module Summary Comparison")
        assert "## Module Changes" in output
        assert "| Removed | rt7M_tl.a | memset.o | +0 | -88 | -16 |" in output
        assert "| Added | rt7M_tl.a | strlen.o | 48 | ------ | ------ |" in output

    def test_unsupported_format(self, formatter, comparison):
        with pytest.raises(ValueError, match="Unsupported format type"):
            formatter.format_output(comparison, "html")

    def test_save(self, formatter, comparison, tmp_path):
        data = formatter.prepare_data(comparison)

        path = formatter.save(data, tmp_path / "reports" / "diff.json", "json")

        assert path.exists()
        assert json.loads(path.read_text(encoding="utf-8"))["summary"]["changed"] == 1

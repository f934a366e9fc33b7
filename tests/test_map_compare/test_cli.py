"""
Integration tests for the map-compare CLI
"""

import json
import os
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from src.map_compare.main import (
    EXIT_CHANGES_FOUND,
    EXIT_INPUT_ERROR,
    EXIT_NO_CHANGES,
    main,
)


class TestMapCompareCLI:
    """Test cases for the map-compare CLI."""

    @pytest.fixture(autouse=True)
    def isolated_environment(self, monkeypatch):
        """Keep logging sinks and MAP_COMPARE_* settings out of the tests."""
        for key in list(os.environ):
            if key.startswith("MAP_COMPARE_"):
                monkeypatch.delenv(key)
        with patch("src.map_compare.main.configure_logging") as mock_configure:
            yield mock_configure

    @pytest.fixture
    def map_files(self, tmp_path, left_map_text, right_map_text):
        left = tmp_path / "old.map"
        right = tmp_path / "new.map"
        left.write_text(left_map_text, encoding="utf-8")
        right.write_text(right_map_text, encoding="utf-8")
        return left, right

    @pytest.fixture
    def runner(self):
        return CliRunner()

    def test_identical_maps_exit_zero(self, runner, map_files):
        left, _ = map_files

        result = runner.invoke(main, [str(left), str(left)])

        assert result.exit_code == EXIT_NO_CHANGES
        assert "No module differences" in result.output

    def test_changes_exit_one(self, runner, map_files):
        left, right = map_files

        result = runner.invoke(main, [str(left), str(right)])

        assert result.exit_code == EXIT_CHANGES_FOUND
        assert "MODULE CHANGES" in result.output
        assert "rt7M_tl.a : memset.o" in result.output
        assert "Comparing" in result.output

    def test_missing_file_exit_two(self, runner, map_files, tmp_path):
        left, _ = map_files

        result = runner.invoke(main, [str(left), str(tmp_path / "missing.map")])

        assert result.exit_code == EXIT_INPUT_ERROR
        assert "Error: Cannot read map file" in result.output

    def test_invalid_config_exit_two(self, runner, map_files, tmp_path):
        left, right = map_files
        config = tmp_path / "config.json"
        config.write_text("{not json", encoding="utf-8")

        result = runner.invoke(main, [str(left), str(right), "-c", str(config)])

        assert result.exit_code == EXIT_INPUT_ERROR
        assert "Invalid JSON" in result.output

    def test_json_output(self, runner, map_files):
        left, right = map_files

        result = runner.invoke(main, [str(left), str(right), "-f", "json", "-q"])

        assert result.exit_code == EXIT_CHANGES_FOUND
        data = json.loads(result.stdout)
        assert data["summary"]["added"] == 2
        assert data["statistics"]["total_delta"]["code_size"] == 56

    def test_show_unchanged(self, runner, map_files):
        left, right = map_files

        result = runner.invoke(
            main, [str(left), str(right), "-f", "json", "-q", "--show-unchanged"]
        )

        data = json.loads(result.stdout)
        assert len(data["items"]) == 6

    def test_output_file(self, runner, map_files, tmp_path):
        left, right = map_files
        output = tmp_path / "out" / "diff.csv"

        result = runner.invoke(
            main, [str(left), str(right), "-f", "csv", "-o", str(output)]
        )

        assert result.exit_code == EXIT_CHANGES_FOUND
        assert output.exists()
        assert output.read_text(encoding="utf-8").startswith("change_type,")
        assert "Output saved to" in result.output

    def test_format_from_environment(self, runner, map_files, monkeypatch):
        left, right = map_files
        monkeypatch.setenv("MAP_COMPARE_OUTPUT_FORMAT", "yaml")

        result = runner.invoke(main, [str(left), str(right), "-q"])

        assert result.exit_code == EXIT_CHANGES_FOUND
        assert "summary:" in result.stdout

    def test_config_file_settings(self, runner, map_files, tmp_path):
        left, right = map_files
        config = tmp_path / "config.json"
        config.write_text(
            json.dumps({"output_format": "json", "show_unchanged": True}),
            encoding="utf-8",
        )

        result = runner.invoke(main, [str(left), str(right), "-q", "-c", str(config)])

        data = json.loads(result.stdout)
        assert len(data["items"]) == 6

    def test_parser_warnings_reported(self, runner, tmp_path):
        left = tmp_path / "a.map"
        right = tmp_path / "b.map"
        left.write_text("*** MODULE SUMMARY\n    main.o  5\n", encoding="utf-8")
        right.write_text(
            "*** MODULE SUMMARY\n    main.o  5\n    bad.o  XYZ\n", encoding="utf-8"
        )

        result = runner.invoke(main, [str(left), str(right), "-q"])

        assert result.exit_code == EXIT_NO_CHANGES
        assert "PARSER WARNINGS" in result.stdout
        assert "XYZ" in result.stdout

        quiet = runner.invoke(main, [str(left), str(right), "-q", "--no-warnings"])
        assert "PARSER WARNINGS" not in quiet.stdout

    def test_log_level_passed_through(
        self, runner, map_files, isolated_environment
    ):
        left, _ = map_files

        runner.invoke(main, [str(left), str(left), "--log-level", "debug"])

        isolated_environment.assert_called_once_with(level="DEBUG")

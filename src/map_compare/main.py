"""CLI entry point for the map compare tool."""

import sys
from pathlib import Path

import click
from dotenv import load_dotenv

from src.shared_utilities import OutputFormat, configure_logging, get_logger

from .config import MapCompareConfig
from .differ import ModuleSummaryDiffer
from .exceptions import ConfigError, MapFileReadError
from .loader import read_map_file
from .output_formatter import MapCompareOutputFormatter
from .parser import ModuleSummaryParser

load_dotenv()

logger = get_logger(__name__)

EXIT_NO_CHANGES = 0
EXIT_CHANGES_FOUND = 1
EXIT_INPUT_ERROR = 2


@click.command()
@click.argument("left_map", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("right_map", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "-f",
    "--format",
    "output_format",
    type=click.Choice(OutputFormat.choices()),
    default=None,
    help="Output format (default: table, or MAP_COMPARE_OUTPUT_FORMAT)",
)
@click.option(
    "--show-unchanged/--hide-unchanged",
    default=None,
    help="Include modules whose sizes did not change (default: changes only)",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the report to a file instead of stdout",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="JSON configuration file",
)
@click.option(
    "--no-warnings",
    is_flag=True,
    help="Leave parser warnings out of the report",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    help="Suppress progress messages",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Logging level (default: LOG_LEVEL env var or WARNING)",
)
def main(
    left_map: Path,
    right_map: Path,
    output_format: str | None,
    show_unchanged: bool | None,
    output: Path | None,
    config_path: Path | None,
    no_warnings: bool,
    quiet: bool,
    log_level: str | None,
) -> None:
    """Compare the MODULE SUMMARY sections of two IAR map files.

    LEFT_MAP is the baseline, RIGHT_MAP the build compared against it.
    Size deltas are reported as right minus left.

    Exit status is 0 when the summaries match, 1 when modules were added,
    removed or resized, and 2 when an input could not be read.

    Examples:
    map-compare build-old/app.map build-new/app.map
    map-compare old.map new.map --format json -o diff.json
    """
    configure_logging(level=log_level.upper() if log_level else None)

    try:
        config = (
            MapCompareConfig.from_file(config_path)
            if config_path
            else MapCompareConfig()
        )
        config = MapCompareConfig.from_env(base=config)

        left_text = read_map_file(left_map)
        right_text = read_map_file(right_map)
    except (ConfigError, MapFileReadError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_INPUT_ERROR)

    fmt = output_format or config.output_format
    include_unchanged = (
        show_unchanged if show_unchanged is not None else config.show_unchanged
    )

    if not quiet:
        click.echo(f"Comparing {left_map} → {right_map}", err=True)

    parser = ModuleSummaryParser(config)
    left_table, left_warnings = parser.parse(left_text)
    right_table, right_warnings = parser.parse(right_text)

    for label, file_warnings in ((left_map, left_warnings), (right_map, right_warnings)):
        if file_warnings:
            logger.warning(
                "Map file parsed with warnings",
                path=str(label),
                count=len(file_warnings),
            )

    result = ModuleSummaryDiffer().diff(left_table, right_table)

    warnings = None
    if not no_warnings:
        warnings = {str(left_map): left_warnings, str(right_map): right_warnings}

    formatter = MapCompareOutputFormatter()
    data = formatter.prepare_data(
        result,
        left_name=str(left_map),
        right_name=str(right_map),
        warnings=warnings,
        show_unchanged=include_unchanged,
    )

    if output:
        path = formatter.save(data, output, fmt)
        if not quiet:
            click.echo(f"Output saved to: {path}", err=True)
    else:
        # click.echo drops the colour codes when stdout is not a terminal
        click.echo(formatter.format(data, fmt, color=True))

    if not quiet and fmt != OutputFormat.TABLE:
        stats = result.get_statistics()
        click.echo("-" * 40, err=True)
        click.echo(f"Total changes: {stats.total_differences}", err=True)
        click.echo(f"Code delta: {stats.totals.code_size:+d} bytes", err=True)

    sys.exit(EXIT_CHANGES_FOUND if result.has_changes else EXIT_NO_CHANGES)


if __name__ == "__main__":
    main()

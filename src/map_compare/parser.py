"""
Parser for the MODULE SUMMARY section of IAR linker map files.

The section looks like this::

    *******************************************************************************
    *** MODULE SUMMARY
    ***

        Module                         ro code  ro data  rw data
        ------                         -------  -------  -------
    C:\\Projects\\A\\Obj: [1]
        Bar.o                               22      44
        Baz.o                               33      55       22
        --------------------------------------------------------
        Total:                              55      99       22

    rt7M_tl.a: [2]
        ABImemcpy.o                      1 074
        --------------------------------------------------------
        Total:                           1 074

        Gaps                                96       90        9
        Linker created                               88  378 432
    ------------------------------------------------------------
        Grand Total:                   492 776  630 240  591 176

Each line is classified as decoration, group header or data row. Size
columns are right-aligned under the column header and large values group
thousands with a single space, so once the header has been seen sizes are
assigned to columns by where they end rather than by their position in the
token list. That is what lets a row leave its ``ro code`` column blank.
"""

import re
from dataclasses import dataclass, field

from src.shared_utilities import get_logger

from .config import MapCompareConfig
from .data_models import ModuleRecord, ModuleSummaryTable, ParseWarning, WarningKind

logger = get_logger(__name__)

SECTION_TITLE = "MODULE SUMMARY"
COLUMN_TITLES = ("ro code", "ro data", "rw data")

_STAR_RULE_RE = re.compile(r"^\s*\*+\s*$")
_TITLED_BANNER_RE = re.compile(r"^\s*\*+\s*(?P<title>[^*\s].*?)\s*$")
_DASH_RULE_RE = re.compile(r"^\s*-+(?:\s+-+)*\s*$")
_COLUMN_HEADER_RE = re.compile(r"^\s*Module\s+ro code\b")
_GROUP_HEADER_RE = re.compile(r"^(?P<name>\S.*?)\s*:\s*\[\d+\]\s*$")
_SIZES_ONLY_RE = re.compile(r"^\s+\d[\d ]*$")
_UNSIGNED_RE = re.compile(r"^\d+$")
# Object and archive names carry a file extension, e.g. "main.o" or "rt7M_tl.a"
_FILE_NAME_RE = re.compile(r"^\S+\.\w+$")
# A value like "6 258" is one number; columns are at least two spaces apart.
_GROUPED_SIZE_TOKEN_RE = re.compile(r"\d{1,3}(?: \d{3})+(?!\d)|\S+")


class _MalformedRow(Exception):
    """A row-shaped line whose size columns cannot be interpreted."""


@dataclass
class _ParseState:
    """Mutable bookkeeping for one parse call."""

    records: list[ModuleRecord] = field(default_factory=list)
    warnings: list[ParseWarning] = field(default_factory=list)
    groups: list[str] = field(default_factory=list)
    current_archive: str = ""
    column_ends: list[int] | None = None
    # Long object names are printed alone, with their sizes on the next line
    pending_identity: tuple[int, str, str] | None = None

    def warn(self, message: str, line_number: int, raw_line: str) -> None:
        self.warnings.append(
            ParseWarning(
                kind=WarningKind.MALFORMED_LINE,
                message=message,
                line_number=line_number,
                raw_line=raw_line,
            )
        )
        logger.debug("Skipping malformed line", line_number=line_number, reason=message)


class ModuleSummaryParser:
    """Turns map file text into a ModuleSummaryTable.

    The parser holds only configuration; all per-file state lives in the
    call, so one instance can parse any number of files.
    """

    def __init__(self, config: MapCompareConfig | None = None):
        self.config = config or MapCompareConfig()
        sep = re.escape(self.config.archive_separator)
        self._row_re = re.compile(
            rf"^\s*(?P<identity>[^\s{sep}]+(?:\s*{sep}\s*[^\s{sep}]+)?)"
            rf"(?:\s+(?P<sizes>\S.*?))?\s*$"
        )
        labels = "|".join(re.escape(label) for label in self.config.aggregate_labels)
        self._aggregate_re = re.compile(rf"^\s*(?:{labels})(?:\s|$)") if labels else None

    def parse(self, text: str) -> tuple[ModuleSummaryTable, list[ParseWarning]]:
        """Parse the module summary section of a map file.

        Args:
            text: Full text of one map file

        Returns:
            The parsed table and the warnings collected on the way. The same
            warnings are attached to the table.
        """
        lines = text.splitlines()
        start = self._find_section(lines)

        if start is None:
            warning = ParseWarning(
                kind=WarningKind.SECTION_NOT_FOUND,
                message=f"No {SECTION_TITLE} section found",
            )
            logger.info("Module summary section not found", lines=len(lines))
            return ModuleSummaryTable(warnings=(warning,)), [warning]

        logger.debug("Module summary section found", line_number=start + 1)

        state = _ParseState()
        for index in range(start + 1, len(lines)):
            if not self._consume_line(state, index + 1, lines[index]):
                logger.debug("Module summary section ended", line_number=index + 1)
                break

        self._flush_pending(state)

        table = ModuleSummaryTable(
            records=tuple(state.records),
            warnings=tuple(state.warnings),
            groups=tuple(state.groups),
        )
        logger.info(
            "Parsed module summary",
            records=len(table.records),
            groups=len(table.groups),
            warnings=len(table.warnings),
        )
        return table, list(state.warnings)

    def _find_section(self, lines: list[str]) -> int | None:
        for index, line in enumerate(lines):
            if line.strip().lstrip("*").strip().upper() == SECTION_TITLE:
                return index
        return None

    def _consume_line(self, state: _ParseState, line_number: int, raw: str) -> bool:
        """Classify one line. Returns False when the section has ended."""
        line = raw.expandtabs()

        if not line.strip() or _STAR_RULE_RE.match(line) or _DASH_RULE_RE.match(line):
            self._flush_pending(state)
            return True

        if _TITLED_BANNER_RE.match(line):
            # Next section, e.g. "*** ENTRY LIST"
            return False

        if _COLUMN_HEADER_RE.match(line):
            self._flush_pending(state)
            state.column_ends = self._column_layout(line)
            return True

        if self._aggregate_re and self._aggregate_re.match(line):
            self._flush_pending(state)
            return True

        group = _GROUP_HEADER_RE.match(line)
        if group:
            self._flush_pending(state)
            name = group.group("name")
            if name not in state.groups:
                state.groups.append(name)
            state.current_archive = name if self.config.is_archive(name) else ""
            return True

        if _SIZES_ONLY_RE.match(line):
            if state.pending_identity is None:
                state.warn("size columns without a module name", line_number, raw)
                return True
            _, archive, object_name = state.pending_identity
            state.pending_identity = None
            self._add_row(state, line_number, raw, archive, object_name, line, 0)
            return True

        row = self._row_re.match(line)
        if not row:
            return False

        identity = self._split_identity(state, row.group("identity"))
        if identity is None:
            # Trailer text such as "[1] = C:\prj\Obj" or "Errors: none"
            return False

        archive, object_name = identity
        self._flush_pending(state)

        if row.group("sizes") is None:
            state.pending_identity = (line_number, archive, object_name)
            return True

        self._add_row(
            state, line_number, raw, archive, object_name, line, row.start("sizes")
        )
        return True

    def _flush_pending(self, state: _ParseState) -> None:
        if state.pending_identity is None:
            return
        line_number, archive, object_name = state.pending_identity
        state.pending_identity = None
        state.warn("module row has no size columns", line_number, object_name)

    def _split_identity(
        self, state: _ParseState, identity: str
    ) -> tuple[str, str] | None:
        """Split "archive : object" into its parts; bare objects take the group.

        Returns None when the parts are not file names, which means the line
        is not a module row at all.
        """
        separator = self.config.archive_separator
        if separator in identity:
            archive, object_name = (
                part.strip() for part in identity.split(separator, 1)
            )
            if not _FILE_NAME_RE.match(archive):
                return None
        else:
            archive, object_name = state.current_archive, identity.strip()

        if not _FILE_NAME_RE.match(object_name):
            return None
        return archive, object_name

    def _add_row(
        self,
        state: _ParseState,
        line_number: int,
        raw: str,
        archive: str,
        object_name: str,
        line: str,
        sizes_start: int,
    ) -> None:
        try:
            sizes = self._parse_sizes(state, line, sizes_start)
        except _MalformedRow as e:
            state.warn(str(e), line_number, raw)
            return

        state.records.append(
            ModuleRecord(
                archive_path=archive,
                object_name=object_name,
                code_size=sizes[0] or 0,
                read_only_data_size=sizes[1],
                read_write_data_size=sizes[2],
            )
        )

    def _column_layout(self, header: str) -> list[int] | None:
        """End offsets of the size columns named in the column header."""
        ends = []
        search_from = 0
        for title in COLUMN_TITLES:
            position = header.find(title, search_from)
            if position < 0:
                break
            search_from = position + len(title)
            ends.append(search_from)
        return ends or None

    def _parse_sizes(
        self, state: _ParseState, line: str, sizes_start: int
    ) -> list[int | None]:
        sizes: list[int | None] = [None] * len(COLUMN_TITLES)
        text = line[sizes_start:]

        if state.column_ends is None:
            tokens = text.split()
            if len(tokens) > len(COLUMN_TITLES):
                raise _MalformedRow(
                    f"expected at most {len(COLUMN_TITLES)} size columns, "
                    f"found {len(tokens)}"
                )
            for column, token in enumerate(tokens):
                sizes[column] = _to_unsigned(token)
            return sizes

        column_ends = state.column_ends
        for match in _GROUPED_SIZE_TOKEN_RE.finditer(text):
            end = sizes_start + match.end()
            column = next(
                (i for i, column_end in enumerate(column_ends) if end <= column_end),
                None,
            )
            if column is None:
                raise _MalformedRow(f"value {match.group()!r} lies past the last column")
            if sizes[column] is not None:
                raise _MalformedRow(
                    f"more than one value in the {COLUMN_TITLES[column]!r} column"
                )
            sizes[column] = _to_unsigned(match.group())

        return sizes


def _to_unsigned(token: str) -> int:
    digits = token.strip().replace(" ", "")
    if not _UNSIGNED_RE.match(digits):
        raise _MalformedRow(f"non-numeric size column {token.strip()!r}")
    return int(digits)


def parse(
    text: str, config: MapCompareConfig | None = None
) -> tuple[ModuleSummaryTable, list[ParseWarning]]:
    """Parse map file text into a module summary table and its warnings."""
    return ModuleSummaryParser(config).parse(text)

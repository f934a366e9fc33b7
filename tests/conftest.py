"""
Pytest configuration and shared fixtures.
"""

import pytest

from src.map_compare.data_models import ModuleRecord, ModuleSummaryTable

# Column header as IAR prints it: names in a 35 character column, then
# three 7 character size columns two spaces apart.
COLUMN_HEADER = "    Module" + " " * 25 + "ro code  ro data  rw data"
COLUMN_RULE = "    ------" + " " * 25 + "-------  -------  -------"
TABLE_RULE = "    " + "-" * 56


def _module_row(name: str, code: str = "", ro: str = "", rw: str = "") -> str:
    """One right-aligned module summary row."""
    return f"    {name:<31}{code:>7}  {ro:>7}  {rw:>7}".rstrip()


def _build_map(*section_lines: str, column_header: bool = True) -> str:
    """Wrap module summary rows in the surrounding map file sections."""
    lines = [
        "###############################################################################",
        "#",
        "#   IAR ELF Linker V8.40.1.212/W32 for ARM                11/Feb/2019  13:31:40",
        "#",
        "###############################################################################",
        "",
        "*******************************************************************************",
        "*** PLACEMENT SUMMARY",
        "***",
        "",
        '"A0":  place at 0x08000000 { ro section .intvec };',
        "",
        "*******************************************************************************",
        "*** MODULE SUMMARY",
        "***",
        "",
    ]
    if column_header:
        lines += [COLUMN_HEADER, COLUMN_RULE]
    lines += list(section_lines)
    lines += [
        "",
        "",
        "*******************************************************************************",
        "*** ENTRY LIST",
        "***",
        "",
        "Entry                      Address    Size  Type      Object",
        "-----                      -------    ----  ----      ------",
        ".iar.dynexit$$Base      0x20004294           --   Gb  - Linker created -",
        "memcpy                  0x08000d1d    0x26  Code  Gb  ABImemcpy.o [4]",
    ]
    return "\n".join(lines) + "\n"


@pytest.fixture
def module_row():
    """Factory for aligned module summary rows."""
    return _module_row


@pytest.fixture
def build_map():
    """Factory for complete map file text around a module summary section."""
    return _build_map


@pytest.fixture
def left_map_text():
    """Baseline map file."""
    return _build_map(
        "C:\\Projects\\Blinky\\Debug\\Obj: [1]",
        _module_row("main.o", "22", "44"),
        _module_row("board.o", "33", "55", "22"),
        TABLE_RULE,
        _module_row("Total:", "55", "99", "22"),
        "",
        "rt7M_tl.a: [2]",
        _module_row("ABImemcpy.o", "1 074"),
        _module_row("memset.o", "", "88", "16"),
        TABLE_RULE,
        _module_row("Total:", "1 074", "88", "16"),
        "",
        _module_row("Gaps", "96", "90", "9"),
        _module_row("Linker created", "", "88", "378 432"),
        "-" * 60,
        _module_row("Grand Total:", "492 776", "630 240", "591 176"),
    )


@pytest.fixture
def right_map_text():
    """Map file of a later build: main.o grew, memset.o left, two modules joined."""
    return _build_map(
        "C:\\Projects\\Blinky\\Debug\\Obj: [1]",
        _module_row("main.o", "30", "44"),
        _module_row("board.o", "33", "55", "22"),
        TABLE_RULE,
        _module_row("Total:", "63", "99", "22"),
        "",
        "rt7M_tl.a: [2]",
        _module_row("ABImemcpy.o", "1 074"),
        _module_row("strlen.o", "48"),
        TABLE_RULE,
        _module_row("Total:", "1 122"),
        "",
        "dl7M_tlf.a: [3]",
        _module_row("xfiles.o", "", "2"),
        TABLE_RULE,
        _module_row("Total:", "", "2"),
        "",
        "-" * 60,
        _module_row("Grand Total:", "492 776", "630 240", "591 176"),
    )


@pytest.fixture
def make_table():
    """Build a ModuleSummaryTable from (archive, object, code, ro, rw) tuples."""

    def _make(*rows, groups=()):
        records = []
        for row in rows:
            archive, name, code, *optional = row
            optional += [None] * (2 - len(optional))
            records.append(
                ModuleRecord(
                    archive_path=archive,
                    object_name=name,
                    code_size=code,
                    read_only_data_size=optional[0],
                    read_write_data_size=optional[1],
                )
            )
        return ModuleSummaryTable(records=tuple(records), groups=tuple(groups))

    return _make

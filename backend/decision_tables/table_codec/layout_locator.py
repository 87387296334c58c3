"""
Finds the RuleTable declaration row and derives the header-row offsets from it.
"""
import logging
from typing import Tuple

from ..errors import FormatError
from ..table_model.table_schema import HeaderRows
from .sheet_grid import SheetGrid

logger = logging.getLogger(__name__)

RULETABLE_MARKER = 'RuleTable'
SCAN_FIRST_ROW = 5
SCAN_LAST_ROW = 10
CONVENTIONAL_ANCHOR_ROW = 6
UNKNOWN_TABLE_NAME = 'Unknown'


def find_anchor_row(grid: SheetGrid) -> int:
    """
    Return the row of the first RuleTable marker in column A within rows 5-10.

    Row 6 is checked first since that is where the marker conventionally sits.
    Raises FormatError when no row in the window carries the marker.
    """
    if grid.text(CONVENTIONAL_ANCHOR_ROW, 1).startswith(RULETABLE_MARKER):
        return CONVENTIONAL_ANCHOR_ROW

    for row in range(SCAN_FIRST_ROW, SCAN_LAST_ROW + 1):
        if grid.text(row, 1).startswith(RULETABLE_MARKER):
            return row

    raise FormatError(
        f"RuleTable declaration not found in rows {SCAN_FIRST_ROW}-{SCAN_LAST_ROW}"
    )


def table_name_from(marker_text: str) -> str:
    name = marker_text[len(RULETABLE_MARKER):].strip()
    return name or UNKNOWN_TABLE_NAME


def locate_table(grid: SheetGrid) -> Tuple[str, HeaderRows]:
    """Return (table name, header rows) for the table declared in the sheet."""
    anchor_row = find_anchor_row(grid)
    name = table_name_from(grid.text(anchor_row, 1))
    if anchor_row != CONVENTIONAL_ANCHOR_ROW:
        logger.info(f"RuleTable declaration found at row {anchor_row}")
    return name, HeaderRows.from_anchor(anchor_row)

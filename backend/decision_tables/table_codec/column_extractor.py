"""
Reads one column definition per physical sheet column from the four header rows.
"""
import logging
from typing import List

from ..table_model.table_schema import Column, HeaderRows, VALID_COLUMN_KINDS, column_id_for
from .sheet_grid import SheetGrid

logger = logging.getLogger(__name__)


def extract_columns(grid: SheetGrid, header_rows: HeaderRows) -> List[Column]:
    """
    Scan every column up to the sheet's column count.

    Columns with a blank kind cell are skipped but do not stop the scan, and
    ids/indexes come from the physical position so gaps survive.
    """
    columns = []

    for index in range(1, grid.column_count + 1):
        kind = grid.text(header_rows.column_types, index)
        if not kind:
            continue

        if kind not in VALID_COLUMN_KINDS:
            logger.debug(f"Column {index} has unrecognised kind '{kind}'")

        columns.append(Column(
            id=column_id_for(index),
            index=index,
            kind=kind,
            object_binding=grid.text(header_rows.object_binding, index),
            pattern_template=grid.text(header_rows.pattern_templates, index),
            label=grid.text(header_rows.column_labels, index) or f'Column {index}',
        ))

    logger.info(f"Extracted {len(columns)} columns")
    return columns

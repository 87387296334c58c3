"""
Byte-level boundary of the codec: .xlsx bytes <-> TableDocument.
"""
import logging

from ..table_model.table_schema import RuleTable, TableDocument
from .column_extractor import extract_columns
from .layout_locator import locate_table
from .metadata_extractor import extract_metadata
from .rule_extractor import extract_rules
from .sheet_grid import SheetGrid, load_sheet_grid

logger = logging.getLogger(__name__)


def parse_grid(grid: SheetGrid) -> TableDocument:
    """
    Build the normalized model from a grid.

    FormatError from the layout locator propagates unchanged; nothing is
    recovered from a sheet whose anchor row is unknown.
    """
    metadata = extract_metadata(grid)
    name, header_rows = locate_table(grid)
    columns = extract_columns(grid, header_rows)
    rules = extract_rules(grid, header_rows.first_rule_row, columns)

    return TableDocument(
        metadata=metadata,
        rule_table=RuleTable(name=name, columns=columns, rules=rules, header_rows=header_rows),
        worksheet_name=grid.title,
        total_rows=grid.row_count,
        total_columns=grid.column_count,
    )


def parse_table_bytes(data: bytes) -> TableDocument:
    """Parse .xlsx bytes. Raises CodecError for unreadable bytes, FormatError for a bad layout."""
    grid = load_sheet_grid(data)
    doc = parse_grid(grid)
    logger.info(
        f"Parsed table '{doc.rule_table.name}' from sheet '{grid.title}': "
        f"{len(doc.rule_table.columns)} columns, {len(doc.rule_table.rules)} rules"
    )
    return doc

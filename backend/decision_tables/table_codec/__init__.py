from .sheet_grid import CellValue, SheetGrid, load_sheet_grid
from .metadata_extractor import extract_metadata
from .layout_locator import locate_table, find_anchor_row
from .column_extractor import extract_columns
from .rule_extractor import extract_rules
from .table_writer import serialize_table
from .format_validator import FormatValidation, validate_grid, validate_table_bytes
from .codec import parse_grid, parse_table_bytes

__all__ = [
    'CellValue', 'SheetGrid', 'load_sheet_grid',
    'extract_metadata', 'locate_table', 'find_anchor_row',
    'extract_columns', 'extract_rules',
    'serialize_table',
    'FormatValidation', 'validate_grid', 'validate_table_bytes',
    'parse_grid', 'parse_table_bytes',
]

"""
Reads the four fixed header rows (RuleSet, Import, Variables, Notes) at the top of the sheet.
"""
from typing import List

from ..table_model.table_schema import Metadata
from .sheet_grid import TEXT, SheetGrid

RULESET_MARKER = 'RuleSet'
IMPORT_MARKER = 'Import'
VARIABLES_MARKER = 'Variables'
NOTES_MARKER = 'Notes'


def split_list(text: str) -> List[str]:
    if not text:
        return []
    return [part.strip() for part in text.split(',')]


def extract_metadata(grid: SheetGrid) -> Metadata:
    """
    A field is only set when its marker is in column A; otherwise it stays None.
    A missing marker is not an error here, the format validator judges that.
    """
    metadata = Metadata()

    if grid.starts_with('A1', RULESET_MARKER):
        metadata.rule_set_name = grid.text_at('B1')

    if grid.starts_with('A2', IMPORT_MARKER):
        metadata.imports = split_list(grid.text_at('B2'))

    if grid.starts_with('A3', VARIABLES_MARKER):
        metadata.variables = split_list(grid.text_at('B3'))

    if grid.starts_with('A4', NOTES_MARKER):
        # notes are free text and keep their surrounding whitespace
        notes = grid.cell_at('B4')
        metadata.notes = notes.value if notes.kind == TEXT else notes.as_text()

    return metadata

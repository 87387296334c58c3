"""
Writes a TableDocument back into a fresh single-sheet workbook using openpyxl.
Structural inverse of the metadata/column/rule extractors.
"""
import io
import logging
import re
import zipfile
from typing import Any

import openpyxl
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE

from ..table_model.table_schema import (
    ACTION, CONDITION, DEFAULT_WORKSHEET_NAME, NAME, HeaderRows, Metadata, RuleTable, TableDocument,
)
from .layout_locator import CONVENTIONAL_ANCHOR_ROW, RULETABLE_MARKER
from .metadata_extractor import IMPORT_MARKER, NOTES_MARKER, RULESET_MARKER, VARIABLES_MARKER

logger = logging.getLogger(__name__)

MAX_SHEET_TITLE = 31

# Fixed archive timestamps so the same document always serializes to the same bytes
_ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)
_CORE_TIMESTAMP = b'2000-01-01T00:00:00Z'
_CORE_DATE_RE = re.compile(rb'(<dcterms:(created|modified)[^>]*>)[^<]*(</dcterms:\2>)')


def _put(ws, row: int, col: int, value: Any):
    # control characters are not allowed in worksheet XML; empty strings are left as empty cells
    if isinstance(value, str):
        value = ILLEGAL_CHARACTERS_RE.sub('', value)
    if value is None or value == '':
        return
    ws.cell(row=row, column=col, value=value)


def write_metadata(ws, metadata: Metadata):
    """Write rows 1-4 for fields that are present and non-empty; anything else writes nothing."""
    if metadata.rule_set_name:
        _put(ws, 1, 1, RULESET_MARKER)
        _put(ws, 1, 2, metadata.rule_set_name)

    if metadata.imports:
        _put(ws, 2, 1, IMPORT_MARKER)
        _put(ws, 2, 2, ', '.join(metadata.imports))

    if metadata.variables:
        _put(ws, 3, 1, VARIABLES_MARKER)
        _put(ws, 3, 2, ', '.join(metadata.variables))

    if metadata.notes:
        _put(ws, 4, 1, NOTES_MARKER)
        _put(ws, 4, 2, metadata.notes)


def write_rule_table(ws, table: RuleTable):
    """
    Write the table block anchored at row 6, whatever row it was read from,
    then one row per rule in list order starting at the first rule row.
    """
    rows = HeaderRows.from_anchor(CONVENTIONAL_ANCHOR_ROW)

    _put(ws, rows.start_row, 1, f'{RULETABLE_MARKER} {table.name}')

    if table.column_at(1) is None:
        _put(ws, rows.column_types, 1, NAME)
        _put(ws, rows.column_labels, 1, 'Rule Name')

    for column in table.columns:
        _put(ws, rows.column_types, column.index, column.kind)
        _put(ws, rows.object_binding, column.index, column.object_binding)
        _put(ws, rows.pattern_templates, column.index, column.pattern_template)
        _put(ws, rows.column_labels, column.index, column.label)

    for offset, rule in enumerate(table.rules):
        row = rows.first_rule_row + offset
        _put(ws, row, 1, rule.rule_name)

        for column in table.columns:
            if column.index == 1:
                continue
            entry = None
            if column.kind == CONDITION:
                entry = rule.conditions.get(column.id)
            elif column.kind == ACTION:
                entry = rule.actions.get(column.id)
            _put(ws, row, column.index, entry.value if entry else '')


def _normalize_archive(raw: bytes) -> bytes:
    """Repack the saved workbook with fixed zip and document-property timestamps."""
    out = io.BytesIO()
    with zipfile.ZipFile(io.BytesIO(raw)) as src, \
            zipfile.ZipFile(out, 'w', zipfile.ZIP_DEFLATED) as dst:
        for item in src.infolist():
            data = src.read(item.filename)
            if item.filename == 'docProps/core.xml':
                data = _CORE_DATE_RE.sub(rb'\g<1>' + _CORE_TIMESTAMP + rb'\g<3>', data)
            info = zipfile.ZipInfo(item.filename, date_time=_ZIP_DATE_TIME)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = item.external_attr
            dst.writestr(info, data)
    return out.getvalue()


def serialize_table(doc: TableDocument) -> bytes:
    """
    Build a new single-worksheet .xlsx for the document and return its bytes.
    No styling or other sheets are carried over; only the worksheet name is.
    """
    wb = openpyxl.Workbook()
    ws = wb.active
    title = ILLEGAL_CHARACTERS_RE.sub('', doc.worksheet_name or '')
    ws.title = (title or DEFAULT_WORKSHEET_NAME)[:MAX_SHEET_TITLE]

    write_metadata(ws, doc.metadata)
    write_rule_table(ws, doc.rule_table)

    buf = io.BytesIO()
    wb.save(buf)
    data = _normalize_archive(buf.getvalue())

    logger.info(f"Serialized table '{doc.rule_table.name}' with {len(doc.rule_table.rules)} rules")
    return data

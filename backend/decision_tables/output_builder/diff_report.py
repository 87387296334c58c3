"""
Generates an Excel report of a table diff (local vs pulled) using openpyxl.
"""
import io
from datetime import datetime
from typing import List, Optional, Tuple

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from ..reconciliation import ADDED, DELETED, MODIFIED, TableDiff, entry_value
from ..table_model.table_schema import Rule

CHANGE_COLORS = {
    ADDED: 'C6EFCE',
    DELETED: 'FFC7CE',
    MODIFIED: 'FFEB9C',
}
CHANGE_LABELS = {
    ADDED: 'Added',
    DELETED: 'Deleted',
    MODIFIED: 'Modified',
}
HEADERS = ['Rule Name', 'Change', 'Field', 'Local value', 'Pulled value']


def _hex_to_fill(hex_color: Optional[str]) -> Optional[PatternFill]:
    if not hex_color:
        return None
    return PatternFill(start_color=hex_color, end_color=hex_color, fill_type='solid')


def _make_header_fill() -> PatternFill:
    return PatternFill(start_color='366092', end_color='366092', fill_type='solid')


def _make_header_font() -> Font:
    return Font(bold=True, color='FFFFFF', name='Calibri', size=11)


def _make_summary_title_fill() -> PatternFill:
    return PatternFill(start_color='D9E1F2', end_color='D9E1F2', fill_type='solid')


def _field_label(rule: Rule, field: str) -> str:
    if field == 'ruleName':
        return 'Rule Name'
    entry = rule.conditions.get(field) or rule.actions.get(field)
    return entry.label if entry else field


def _report_rows(diff: TableDiff) -> List[Tuple[str, str, str, str, str, str]]:
    """(rule name, change type, field, local value, pulled value, change key) per report line."""
    rows = []
    for rd in diff.diffs:
        label = CHANGE_LABELS[rd.change_type]
        if rd.change_type == MODIFIED:
            for f in rd.changed_fields:
                if f == 'ruleName':
                    local, pulled = rd.current_rule.rule_name, rd.rule.rule_name
                else:
                    local, pulled = entry_value(rd.current_rule, f), entry_value(rd.rule, f)
                rows.append((rd.rule_name, label, _field_label(rd.rule, f), local, pulled, rd.change_type))
        else:
            rows.append((rd.rule_name, label, '', '', '', rd.change_type))
    return rows


def build_diff_report(diff: TableDiff, table_name: str) -> bytes:
    """
    Build a two-sheet workbook: 'Changes' (one line per changed field, colour
    coded by change type) and 'Summary'. Returns raw .xlsx bytes.
    """
    wb = openpyxl.Workbook()

    ws = wb.active
    ws.title = 'Changes'

    col_widths = [max(10, len(h)) for h in HEADERS]
    for col_idx, header in enumerate(HEADERS, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.fill = _make_header_fill()
        cell.font = _make_header_font()
        cell.alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)

    for row_idx, line in enumerate(_report_rows(diff), start=2):
        *values, change_type = line
        for col_idx, value in enumerate(values, start=1):
            cell = ws.cell(row=row_idx, column=col_idx, value=value or None)
            cell.alignment = Alignment(vertical='center', wrap_text=False)
            fill = _hex_to_fill(CHANGE_COLORS.get(change_type))
            if fill:
                cell.fill = fill
            if value:
                col_widths[col_idx - 1] = min(40, max(col_widths[col_idx - 1], len(str(value))))

    for col_idx, width in enumerate(col_widths, start=1):
        ws.column_dimensions[get_column_letter(col_idx)].width = width + 2

    ws.freeze_panes = 'A2'

    ws_sum = wb.create_sheet(title='Summary')
    ws_sum.cell(row=1, column=1, value=f'{table_name} - Pull Review Summary').font = Font(bold=True, size=14)
    ws_sum.cell(row=2, column=1, value=f'Generated: {datetime.now().strftime("%d %b %Y %H:%M")}')

    summary_rows = [
        ('Rules added (only in pulled)', len(diff.added)),
        ('Rules deleted (only in local)', len(diff.deleted)),
        ('Rules modified', len(diff.modified)),
        ('Column structure changed', 'Yes' if diff.columns_changed else 'No'),
    ]
    for i, (label, val) in enumerate(summary_rows, start=4):
        label_cell = ws_sum.cell(row=i, column=1, value=label)
        ws_sum.cell(row=i, column=2, value=val)
        label_cell.fill = _make_summary_title_fill()
        label_cell.font = Font(bold=True)

    ws_sum.column_dimensions['A'].width = 40
    ws_sum.column_dimensions['B'].width = 15

    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    return buf.read()

import io

import openpyxl

from decision_tables.output_builder import build_diff_report
from decision_tables.reconciliation import diff_tables
from decision_tables.table_codec import parse_table_bytes

from conftest import build_workbook, offers_rows


def test_report_sheets_and_rows():
    current = parse_table_bytes(build_workbook(offers_rows(['R1', '30', '10'], ['R2', '40', '15'])))
    pulled = parse_table_bytes(build_workbook(offers_rows(['R2', '45', '15'], ['R3', '50', '20'])))
    data = build_diff_report(diff_tables(current, pulled), 'Offers')

    wb = openpyxl.load_workbook(io.BytesIO(data))
    assert wb.sheetnames == ['Changes', 'Summary']

    ws = wb['Changes']
    assert [c.value for c in ws[1]] == ['Rule Name', 'Change', 'Field', 'Local value', 'Pulled value']
    lines = [[c.value for c in row] for row in ws.iter_rows(min_row=2)]
    assert lines == [
        ['R2', 'Modified', 'Age', '40', '45'],
        ['R3', 'Added', None, None, None],
        ['R1', 'Deleted', None, None, None],
    ]
    assert ws['A2'].fill.start_color.rgb.endswith('FFEB9C')
    assert ws['A3'].fill.start_color.rgb.endswith('C6EFCE')
    assert ws['A4'].fill.start_color.rgb.endswith('FFC7CE')

    summary = wb['Summary']
    assert summary['A1'].value == 'Offers - Pull Review Summary'
    assert [summary.cell(row=r, column=2).value for r in range(4, 8)] == [1, 1, 1, 'No']


def test_report_for_empty_diff(offers_doc):
    data = build_diff_report(diff_tables(offers_doc, offers_doc.clone()), 'Offers')
    ws = openpyxl.load_workbook(io.BytesIO(data))['Changes']
    assert ws.max_row == 1

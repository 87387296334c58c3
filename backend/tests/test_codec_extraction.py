import pytest

from decision_tables.errors import CodecError, FormatError
from decision_tables.table_codec import extract_metadata, parse_grid, parse_table_bytes
from decision_tables.table_codec.layout_locator import find_anchor_row, locate_table
from decision_tables.table_codec.sheet_grid import SheetGrid
from decision_tables.table_model import ACTION, CONDITION, NAME

from conftest import OFFERS_HEADER, build_workbook, offers_rows


def test_offers_table_parses(offers_doc):
    table = offers_doc.rule_table
    assert offers_doc.metadata.rule_set_name == 'com.example.rules'
    assert table.name == 'Offers'
    assert [c.kind for c in table.columns] == [NAME, CONDITION, ACTION]

    conditions = [c for c in table.columns if c.kind == CONDITION]
    assert len(conditions) == 1
    condition = conditions[0]
    assert condition.pattern_template == '$c.getAge() > ($param)'
    assert condition.object_binding == '$c:Customer'
    assert condition.label == 'Age'

    action = next(c for c in table.columns if c.kind == ACTION)
    assert len(table.rules) == 1
    rule = table.rules[0]
    assert rule.rule_name == 'R1'
    assert rule.conditions[condition.id].value == '30'
    assert rule.actions[action.id].value == '10'
    assert rule.conditions[condition.id].pattern_template == '$c.getAge() > ($param)'


def test_ids_follow_physical_position(offers_doc):
    table = offers_doc.rule_table
    assert [c.id for c in table.columns] == ['col_1', 'col_2', 'col_3']
    assert table.rules[0].id == 'rule_11'
    assert table.rules[0].row_index == 11


def test_numeric_cells_are_coerced_to_text():
    doc = parse_table_bytes(build_workbook(offers_rows(['R1', 30, 10.0])))
    rule = doc.rule_table.rules[0]
    assert rule.conditions['col_2'].value == '30'
    assert rule.actions['col_3'].value == '10'


def test_blank_rule_rows_do_not_stop_extraction():
    doc = parse_table_bytes(build_workbook(offers_rows(
        ['R1', '30', '10'],
        ['', '', ''],
        ['R2', '40', '15'],
    )))
    rules = doc.rule_table.rules
    assert [r.rule_name for r in rules] == ['R1', 'R2']
    assert rules[1].id == 'rule_13'


def test_blank_columns_do_not_stop_extraction():
    rows = [list(r) for r in OFFERS_HEADER]
    rows[6] = ['NAME', 'CONDITION', '', 'ACTION']
    rows[8] = ['', '$c.getAge() > ($param)', '', 'offer.setDiscount($param);']
    rows[9] = ['Rule Name', 'Age', '', 'Discount']
    rows.append(['R1', '30', 'ignored', '10'])

    doc = parse_table_bytes(build_workbook(rows))
    columns = doc.rule_table.columns
    assert [c.index for c in columns] == [1, 2, 4]
    assert columns[2].id == 'col_4'
    assert doc.rule_table.rules[0].actions['col_4'].value == '10'


def test_anchor_found_away_from_row_six():
    rows = [['RuleSet', 'x'], [], [], [], [], [], [], ['RuleTable Moved'],
            ['NAME', 'CONDITION'], [], ['', 'a == $param'], ['Rule Name', 'A'], ['R1', '1']]
    doc = parse_table_bytes(build_workbook(rows))
    table = doc.rule_table
    assert table.name == 'Moved'
    assert table.header_rows.start_row == 8
    assert table.header_rows.first_rule_row == 13
    assert table.rules[0].conditions['col_2'].value == '1'


def test_row_six_wins_over_earlier_marker():
    grid = SheetGrid.from_rows([[], [], [], [], ['RuleTable First'], ['RuleTable Sixth']])
    assert find_anchor_row(grid) == 6
    assert locate_table(grid)[0] == 'Sixth'


def test_marker_without_name_is_unknown():
    grid = SheetGrid.from_rows([[], [], [], [], [], ['RuleTable']])
    assert locate_table(grid)[0] == 'Unknown'


def test_missing_anchor_raises_format_error():
    grid = SheetGrid.from_rows([['RuleSet', 'x'], [], [], [], [], [], [], [], [], [], ['RuleTable Late']])
    with pytest.raises(FormatError) as exc:
        parse_grid(grid)
    assert 'rows 5-10' in exc.value.message


def test_absent_metadata_markers_stay_none(offers_doc):
    metadata = offers_doc.metadata
    assert metadata.imports is None
    assert metadata.variables is None
    assert metadata.notes is None
    assert 'imports' not in metadata.to_dict()


def test_present_metadata_lists_are_split():
    rows = [list(r) for r in OFFERS_HEADER]
    rows[1] = ['Import', 'com.example.Customer, com.example.Offer']
    rows[2] = ['Variables', '']
    rows[3] = ['Notes', 'pricing rules']
    doc = parse_table_bytes(build_workbook(rows))
    assert doc.metadata.imports == ['com.example.Customer', 'com.example.Offer']
    assert doc.metadata.variables == []
    assert doc.metadata.notes == 'pricing rules'


def test_unreadable_bytes_raise_codec_error():
    with pytest.raises(CodecError):
        parse_table_bytes(b'PK\x03\x04 truncated')


def test_unrecognised_kind_is_kept_without_rule_entries():
    rows = [list(r) for r in OFFERS_HEADER]
    rows[6] = ['NAME', 'CONDITION', 'OUTPUT']
    rows.append(['R1', '30', 'x'])
    doc = parse_table_bytes(build_workbook(rows))

    column = doc.rule_table.column_by_id('col_3')
    assert column.kind == 'OUTPUT'
    assert column.label == 'Discount'
    rule = doc.rule_table.rules[0]
    assert 'col_3' not in rule.conditions
    assert 'col_3' not in rule.actions
    assert list(rule.conditions) == ['col_2']


def test_table_without_name_column():
    rows = [list(r) for r in OFFERS_HEADER]
    rows[6] = ['', 'CONDITION', 'ACTION']
    rows.append(['R1', '30', '10'])
    doc = parse_table_bytes(build_workbook(rows))

    assert [c.id for c in doc.rule_table.columns] == ['col_2', 'col_3']
    rule = doc.rule_table.rules[0]
    assert rule.rule_name == 'R1'
    assert rule.conditions['col_2'].value == '30'
    assert rule.actions['col_3'].value == '10'


def test_table_with_two_name_columns():
    rows = [list(r) for r in OFFERS_HEADER]
    rows[6] = ['NAME', 'CONDITION', 'NAME']
    rows.append(['R1', '30', 'Alias'])
    doc = parse_table_bytes(build_workbook(rows))

    assert [c.kind for c in doc.rule_table.columns] == [NAME, CONDITION, NAME]
    rule = doc.rule_table.rules[0]
    assert rule.rule_name == 'R1'
    assert list(rule.conditions) == ['col_2']
    assert rule.actions == {}


def test_notes_are_not_trimmed():
    grid = SheetGrid.from_rows([['RuleSet', 'x'], [], [], ['Notes', '  padded note  ']])
    assert extract_metadata(grid).notes == '  padded note  '


def test_numeric_notes_render_as_text():
    grid = SheetGrid.from_rows([[], [], [], ['Notes', 2024.0]])
    assert extract_metadata(grid).notes == '2024'

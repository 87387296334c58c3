from decision_tables.reconciliation import ADDED, DELETED, MODIFIED, diff_tables
from decision_tables.table_codec import parse_table_bytes
from decision_tables.table_model import add_column, update_cell

from conftest import build_workbook, offers_rows


def _doc(*rules):
    return parse_table_bytes(build_workbook(offers_rows(*rules)))


def _names(diffs):
    return [d.rule_name for d in diffs]


def test_identity_has_no_changes(multi_rule_doc):
    diff = diff_tables(multi_rule_doc, multi_rule_doc.clone())
    assert diff.added == [] and diff.deleted == [] and diff.modified == []
    assert diff.columns_changed is False
    assert not diff.has_changes


def test_completeness_with_modified_overlap():
    a = _doc(['R1', '30', '10'], ['R2', '40', '15'])
    b = _doc(['R2', '40', '25'], ['R3', '50', '20'])
    diff = diff_tables(a, b)
    assert _names(diff.added) == ['R3']
    assert _names(diff.deleted) == ['R1']
    assert _names(diff.modified) == ['R2']
    modified = diff.modified[0]
    assert modified.change_type == MODIFIED
    assert modified.current_rule.actions['col_3'].value == '15'
    assert modified.rule.actions['col_3'].value == '25'
    assert modified.changed_fields == ['col_3']


def test_completeness_with_equal_overlap():
    a = _doc(['R1', '30', '10'], ['R2', '40', '15'])
    b = _doc(['R2', '40', '15'], ['R3', '50', '20'])
    diff = diff_tables(a, b)
    assert _names(diff.added) == ['R3']
    assert _names(diff.deleted) == ['R1']
    assert diff.modified == []


def test_reordering_and_ids_are_not_changes():
    a = _doc(['R1', '30', '10'], ['R2', '40', '15'])
    b = _doc(['R2', '40', '15'], [], ['R1', '30', '10'])
    diff = diff_tables(a, b)
    assert not diff.has_changes


def test_report_order():
    a = _doc(['R1', '30', '10'], ['R2', '40', '15'])
    b = _doc(['R3', '1', '1'], ['R2', '41', '15'])
    diff = diff_tables(a, b)
    assert [(d.change_type, d.rule_name) for d in diff.diffs] == [
        (ADDED, 'R3'), (MODIFIED, 'R2'), (DELETED, 'R1'),
    ]
    assert diff.summary == {'added': 1, 'deleted': 1, 'modified': 1, 'columnsChanged': False}


def test_schema_change_sets_flag(multi_rule_doc):
    pulled = multi_rule_doc.clone()
    add_column(pulled, 'CONDITION', 'Country')
    diff = diff_tables(multi_rule_doc, pulled)
    assert diff.columns_changed
    assert diff.has_changes
    assert len(diff.modified) == 3


def test_rename_is_delete_plus_add(offers_doc):
    pulled = offers_doc.clone()
    update_cell(pulled, 'rule_11', 'col_1', 'R1 renamed')
    diff = diff_tables(offers_doc, pulled)
    assert _names(diff.added) == ['R1 renamed']
    assert _names(diff.deleted) == ['R1']


def test_duplicate_names_last_occurrence_wins():
    a = _doc(['R1', '30', '10'])
    b = _doc(['R1', '99', '99'], ['R1', '30', '10'])
    diff = diff_tables(a, b)
    assert diff.warnings == {'duplicate_rule_names_pulled': 1}
    # each pulled R1 is looked up against the single local R1; only the first differs
    assert _names(diff.modified) == ['R1']
    assert diff.to_dict()['warnings'] == {'duplicate_rule_names_pulled': 1}


def test_to_dict_shape(offers_doc):
    pulled = offers_doc.clone()
    update_cell(pulled, 'rule_11', 'col_2', '31')
    d = diff_tables(offers_doc, pulled).to_dict()
    assert d['hasChanges'] is True
    entry = d['modified'][0]
    assert entry['type'] == 'modified'
    assert entry['ruleName'] == 'R1'
    assert entry['changedFields'] == ['col_2']
    assert entry['currentRule']['conditions']['col_2']['value'] == '30'

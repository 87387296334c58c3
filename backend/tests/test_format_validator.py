from decision_tables.table_codec import validate_table_bytes

from conftest import OFFERS_HEADER, build_workbook


def test_valid_document(offers_bytes):
    result = validate_table_bytes(offers_bytes)
    assert result.is_valid
    assert result.errors == []
    assert result.to_dict() == {'isValid': True, 'errors': []}


def test_missing_ruleset_marker_rejected_even_with_table():
    rows = [list(r) for r in OFFERS_HEADER]
    rows[0] = ['Package', 'com.example.rules']
    result = validate_table_bytes(build_workbook(rows))
    assert not result.is_valid
    assert result.errors == ['Missing or invalid RuleSet declaration in A1']


def test_missing_table_marker():
    result = validate_table_bytes(build_workbook([['RuleSet', 'x']]))
    assert not result.is_valid
    assert result.errors == ['RuleTable declaration not found in expected rows (5-10)']


def test_both_markers_missing_reports_both():
    result = validate_table_bytes(build_workbook([['nothing here']]))
    assert len(result.errors) == 2


def test_unreadable_bytes_never_raise():
    result = validate_table_bytes(b'not a workbook')
    assert not result.is_valid
    assert len(result.errors) == 1
    assert result.errors[0].startswith('Validation failed: ')

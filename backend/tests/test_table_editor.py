import pytest

from decision_tables.errors import ValidationError
from decision_tables.table_model import (
    ACTION, CONDITION, add_column, add_rule, delete_column, delete_rule, duplicate_rule,
    move_rule, update_cell, update_column,
)


def _entry_ids(rule):
    return set(rule.conditions), set(rule.actions)


class TestCells:
    def test_update_condition_value(self, offers_doc):
        rule = update_cell(offers_doc, 'rule_11', 'col_2', '45')
        assert rule.conditions['col_2'].value == '45'

    def test_name_column_renames_rule(self, offers_doc):
        update_cell(offers_doc, 'rule_11', 'col_1', '  Senior  ')
        assert offers_doc.rule_table.rules[0].rule_name == 'Senior'

    def test_empty_rule_name_rejected(self, offers_doc):
        with pytest.raises(ValidationError):
            update_cell(offers_doc, 'rule_11', 'col_1', ' ')

    def test_unknown_ids_rejected(self, offers_doc):
        with pytest.raises(ValidationError, match="Rule 'rule_99' not found"):
            update_cell(offers_doc, 'rule_99', 'col_2', '1')
        with pytest.raises(ValidationError, match="Column 'col_9' not found"):
            update_cell(offers_doc, 'rule_11', 'col_9', '1')


class TestColumns:
    def test_add_column_extends_every_rule(self, multi_rule_doc):
        column = add_column(multi_rule_doc, CONDITION, 'Country', '$c:Customer', '$c.getCountry() == $param')
        assert column.index == 4
        assert column.id == 'col_4'
        for rule in multi_rule_doc.rule_table.rules:
            entry = rule.conditions['col_4']
            assert entry.value == ''
            assert entry.label == 'Country'
            assert entry.pattern_template == '$c.getCountry() == $param'

    def test_add_column_requires_entry_kind(self, offers_doc):
        with pytest.raises(ValidationError):
            add_column(offers_doc, 'NAME', 'Another name')

    def test_delete_column_removes_entries(self, multi_rule_doc):
        delete_column(multi_rule_doc, 'col_2')
        table = multi_rule_doc.rule_table
        assert [c.id for c in table.columns] == ['col_1', 'col_3']
        for rule in table.rules:
            assert _entry_ids(rule) == (set(), {'col_3'})

    def test_name_column_cannot_be_deleted(self, offers_doc):
        with pytest.raises(ValidationError):
            delete_column(offers_doc, 'col_1')

    def test_update_column_propagates_snapshots(self, multi_rule_doc):
        update_column(multi_rule_doc, 'col_3', label='Discount %', pattern_template='offer.pct($param);')
        for rule in multi_rule_doc.rule_table.rules:
            assert rule.actions['col_3'].label == 'Discount %'
            assert rule.actions['col_3'].pattern_template == 'offer.pct($param);'

    def test_update_column_without_propagation(self, offers_doc):
        update_column(offers_doc, 'col_3', label='Renamed', propagate=False)
        assert offers_doc.rule_table.column_by_id('col_3').label == 'Renamed'
        assert offers_doc.rule_table.rules[0].actions['col_3'].label == 'Discount'


class TestRules:
    def test_add_rule_has_entry_per_column(self, offers_doc):
        rule = add_rule(offers_doc, 'R2', {'col_2': '65'})
        assert _entry_ids(rule) == ({'col_2'}, {'col_3'})
        assert rule.conditions['col_2'].value == '65'
        assert rule.actions['col_3'].value == ''
        assert offers_doc.rule_table.rules[-1] is rule

    def test_add_rule_rejects_unknown_column(self, offers_doc):
        with pytest.raises(ValidationError, match='col_7'):
            add_rule(offers_doc, 'R2', {'col_7': 'x'})

    def test_rule_ids_are_never_reused(self, offers_doc):
        first = add_rule(offers_doc, 'R2')
        assert first.id == 'rule_12'
        delete_rule(offers_doc, first.id)
        second = add_rule(offers_doc, 'R3')
        assert second.id == 'rule_13'

    def test_duplicate_inserts_after_source(self, multi_rule_doc):
        clone = duplicate_rule(multi_rule_doc, 'rule_11', 'R1 copy')
        rules = multi_rule_doc.rule_table.rules
        assert [r.rule_name for r in rules] == ['R1', 'R1 copy', 'R2', 'R3']
        assert clone.conditions == rules[0].conditions
        assert clone.conditions is not rules[0].conditions

    def test_move_rule_clamps_position(self, multi_rule_doc):
        move_rule(multi_rule_doc, 'rule_11', 10)
        assert [r.rule_name for r in multi_rule_doc.rule_table.rules] == ['R2', 'R3', 'R1']
        move_rule(multi_rule_doc, 'rule_11', -3)
        assert [r.rule_name for r in multi_rule_doc.rule_table.rules] == ['R1', 'R2', 'R3']
        assert multi_rule_doc.rule_table.rules[0].actions['col_3'].value == '10'

    def test_add_rule_kind_lookup_uses_action(self, offers_doc):
        add_column(offers_doc, ACTION, 'Message', pattern_template='log($param);')
        rule = add_rule(offers_doc, 'R2', {'col_4': 'hello'})
        assert rule.actions['col_4'].value == 'hello'


class TestArgumentTypes:
    def test_non_string_label(self, offers_doc):
        with pytest.raises(ValidationError, match="'label' must be a string"):
            add_column(offers_doc, CONDITION, 5)
        with pytest.raises(ValidationError, match="'label' must be a string"):
            update_column(offers_doc, 'col_2', label=['Age'])
        assert len(offers_doc.rule_table.columns) == 3

    def test_non_string_kind(self, offers_doc):
        with pytest.raises(ValidationError, match='Column type must be one of'):
            add_column(offers_doc, ['CONDITION'], 'Country')

    def test_non_string_template(self, offers_doc):
        with pytest.raises(ValidationError, match="'pattern_template' must be a string"):
            update_column(offers_doc, 'col_2', pattern_template=7)

    def test_numeric_cell_values_are_accepted(self, offers_doc):
        update_cell(offers_doc, 'rule_11', 'col_2', 42)
        assert offers_doc.rule_table.rules[0].conditions['col_2'].value == '42'
        rule = add_rule(offers_doc, 'R2', {'col_3': 0})
        assert rule.actions['col_3'].value == '0'

    def test_structured_cell_values_are_rejected(self, offers_doc):
        with pytest.raises(ValidationError, match="'value' must be a string or number"):
            update_cell(offers_doc, 'rule_11', 'col_2', {'v': 1})
        with pytest.raises(ValidationError):
            add_rule(offers_doc, 'R2', ['30', '10'])
        with pytest.raises(ValidationError, match="'col_2' must be a string or number"):
            add_rule(offers_doc, 'R2', {'col_2': [30]})
        assert len(offers_doc.rule_table.rules) == 1

    def test_non_string_rule_names(self, offers_doc):
        with pytest.raises(ValidationError):
            add_rule(offers_doc, 12)
        with pytest.raises(ValidationError):
            duplicate_rule(offers_doc, 'rule_11', None)

    def test_move_position_must_be_integer(self, multi_rule_doc):
        for bad in ('x', None, True, [1]):
            with pytest.raises(ValidationError, match="'new_position' must be an integer"):
                move_rule(multi_rule_doc, 'rule_11', bad)
        assert [r.rule_name for r in multi_rule_doc.rule_table.rules] == ['R1', 'R2', 'R3']
        move_rule(multi_rule_doc, 'rule_11', '2')
        assert [r.rule_name for r in multi_rule_doc.rule_table.rules] == ['R2', 'R3', 'R1']

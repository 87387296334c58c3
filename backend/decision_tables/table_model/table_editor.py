"""
In-place edit operations on a TableDocument.

Every operation keeps the rule/column invariant: each rule holds exactly one
condition entry per CONDITION column and one action entry per ACTION column.
"""
import copy
import logging
from typing import Dict, Optional

from ..errors import ValidationError
from .table_schema import (
    ENTRY_KINDS, NAME, Column, Rule, RuleEntry, TableDocument, column_id_for,
)

logger = logging.getLogger(__name__)


def _get_rule(doc: TableDocument, rule_id: str) -> Rule:
    rule = doc.rule_table.rule_by_id(rule_id)
    if rule is None:
        raise ValidationError(f"Rule '{rule_id}' not found")
    return rule


def _get_column(doc: TableDocument, column_id: str) -> Column:
    column = doc.rule_table.column_by_id(column_id)
    if column is None:
        raise ValidationError(f"Column '{column_id}' not found")
    return column


def _optional_text(value, field: str) -> Optional[str]:
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"'{field}' must be a string")
    return value


def _required_text(value, field: str, empty_message: str) -> str:
    value = _optional_text(value, field)
    if not value or not value.strip():
        raise ValidationError(empty_message)
    return value.strip()


def _cell_text(value, field: str = 'value') -> str:
    # numbers are accepted as cell values the same way a sheet cell would hold them
    if value is None:
        return ''
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ValidationError(f"'{field}' must be a string or number")
    return str(value)


def update_cell(doc: TableDocument, rule_id: str, column_id: str, value: str) -> Rule:
    """Set one grid cell. The NAME column renames the rule; other kinds set the entry value."""
    rule = _get_rule(doc, rule_id)
    column = _get_column(doc, column_id)
    value = _cell_text(value)

    if column.kind == NAME:
        rule.rule_name = _required_text(value, 'value', "Rule name cannot be empty")
        return rule

    entries = rule.entries_for(column.kind)
    if entries is None:
        raise ValidationError(f"Column '{column_id}' of kind '{column.kind}' holds no rule values")
    if column_id not in entries:
        entries[column_id] = RuleEntry.for_column(column)
    entries[column_id].value = value
    return rule


def add_column(doc: TableDocument, kind: str, label: str,
               object_binding: str = '', pattern_template: str = '') -> Column:
    """Append a CONDITION/ACTION column after the right-most one and give every rule an empty entry."""
    if not isinstance(kind, str) or kind not in ENTRY_KINDS:
        raise ValidationError(f"Column type must be one of {sorted(ENTRY_KINDS)}, got '{kind}'")
    label = _required_text(label, 'label', "Column label is required")
    object_binding = _optional_text(object_binding, 'object_binding')
    pattern_template = _optional_text(pattern_template, 'pattern_template')

    table = doc.rule_table
    next_index = max((c.index for c in table.columns), default=0) + 1
    column = Column(
        id=column_id_for(next_index),
        index=next_index,
        kind=kind,
        object_binding=object_binding or '',
        pattern_template=pattern_template or '',
        label=label,
    )
    table.columns.append(column)

    for rule in table.rules:
        rule.entries_for(kind)[column.id] = RuleEntry.for_column(column)

    logger.info(f"Added {kind} column '{column.label}' at index {next_index}")
    return column


def delete_column(doc: TableDocument, column_id: str) -> Column:
    """Remove a column and its entry from every rule. Surviving columns keep their ids."""
    column = _get_column(doc, column_id)
    if column.index == 1:
        raise ValidationError("The rule name column cannot be deleted")

    table = doc.rule_table
    table.columns = [c for c in table.columns if c.id != column_id]
    for rule in table.rules:
        rule.conditions.pop(column_id, None)
        rule.actions.pop(column_id, None)

    logger.info(f"Deleted column '{column_id}'")
    return column


def update_column(doc: TableDocument, column_id: str, label: Optional[str] = None,
                  pattern_template: Optional[str] = None, object_binding: Optional[str] = None,
                  propagate: bool = True) -> Column:
    """
    Edit a column header. Rules hold copies of label/template, so with
    ``propagate`` the copies in every rule are rewritten too.
    """
    column = _get_column(doc, column_id)
    pattern_template = _optional_text(pattern_template, 'pattern_template')
    object_binding = _optional_text(object_binding, 'object_binding')
    if label is not None:
        column.label = _required_text(label, 'label', "Column label is required")
    if pattern_template is not None:
        column.pattern_template = pattern_template
    if object_binding is not None:
        column.object_binding = object_binding

    if propagate:
        for rule in doc.rule_table.rules:
            entries = rule.entries_for(column.kind)
            if entries is not None and column_id in entries:
                entries[column_id].label = column.label
                entries[column_id].pattern_template = column.pattern_template
    return column


def add_rule(doc: TableDocument, rule_name: str, values: Optional[Dict[str, str]] = None) -> Rule:
    """Append a rule with one entry per CONDITION/ACTION column; ``values`` maps column id to value."""
    rule_name = _required_text(rule_name, 'rule_name', "Rule name cannot be empty")
    values = values or {}
    if not isinstance(values, dict):
        raise ValidationError("'values' must be an object keyed by column id")
    table = doc.rule_table

    unknown = [str(col_id) for col_id in values if table.column_by_id(col_id) is None]
    if unknown:
        raise ValidationError(f"Unknown column id(s): {', '.join(unknown)}")
    values = {col_id: _cell_text(value, col_id) for col_id, value in values.items()}

    rule = Rule(id=table.next_rule_id(), rule_name=rule_name)
    for column in table.columns:
        if column.index == 1:
            continue
        entries = rule.entries_for(column.kind)
        if entries is not None:
            entries[column.id] = RuleEntry.for_column(column, values.get(column.id, ''))

    table.rules.append(rule)
    return rule


def delete_rule(doc: TableDocument, rule_id: str) -> Rule:
    rule = _get_rule(doc, rule_id)
    doc.rule_table.rules.remove(rule)
    return rule


def duplicate_rule(doc: TableDocument, rule_id: str, new_name: str) -> Rule:
    """Copy a rule's entries under a new name, inserted right after the source rule."""
    source = _get_rule(doc, rule_id)
    new_name = _required_text(new_name, 'new_name', "Rule name cannot be empty")

    table = doc.rule_table
    clone = Rule(
        id=table.next_rule_id(),
        rule_name=new_name,
        conditions=copy.deepcopy(source.conditions),
        actions=copy.deepcopy(source.actions),
    )
    table.rules.insert(table.rules.index(source) + 1, clone)
    return clone


def move_rule(doc: TableDocument, rule_id: str, new_position: int) -> Rule:
    """Move a rule to a 0-based position in the rule list (clamped to the list bounds)."""
    rule = _get_rule(doc, rule_id)
    if isinstance(new_position, bool):
        raise ValidationError("'new_position' must be an integer")
    try:
        position = int(new_position)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError("'new_position' must be an integer")
    rules = doc.rule_table.rules
    rules.remove(rule)
    position = max(0, min(position, len(rules)))
    rules.insert(position, rule)
    return rule


EDIT_OPERATIONS = {
    'update_cell': update_cell,
    'add_column': add_column,
    'delete_column': delete_column,
    'update_column': update_column,
    'add_rule': add_rule,
    'delete_rule': delete_rule,
    'duplicate_rule': duplicate_rule,
    'move_rule': move_rule,
}

"""
Structural comparison of rules and column schemas.
"""
from typing import Dict, List, Optional

from ..table_model.table_schema import Column, Rule, RuleEntry


def rules_differ(current: Rule, pulled: Rule) -> bool:
    """Deep comparison over rule name, conditions and actions. Ids and row positions are ignored."""
    return current.content_dict() != pulled.content_dict()


def _entry_map(rule: Rule) -> Dict[str, RuleEntry]:
    return {**rule.conditions, **rule.actions}


def entry_value(rule: Optional[Rule], column_id: str) -> str:
    if rule is None:
        return ''
    entry = _entry_map(rule).get(column_id)
    return entry.value if entry else ''


def changed_fields(current: Rule, pulled: Rule) -> List[str]:
    """
    List what differs between two versions of a rule: 'ruleName' and/or the
    column ids whose entry (value, label or template) is not the same.
    """
    changed = []
    if current.rule_name != pulled.rule_name:
        changed.append('ruleName')

    current_entries = _entry_map(current)
    pulled_entries = _entry_map(pulled)
    for column_id in list(dict.fromkeys(list(current_entries) + list(pulled_entries))):
        a = current_entries.get(column_id)
        b = pulled_entries.get(column_id)
        if a is None or b is None or a.to_dict() != b.to_dict():
            changed.append(column_id)

    # same entry under conditions on one side and actions on the other
    if not changed and rules_differ(current, pulled):
        changed.extend(sorted(set(current.conditions) ^ set(pulled.conditions)))
    return changed


def columns_changed(current: List[Column], pulled: List[Column]) -> bool:
    """Single flag for the ordered column sequence; no per-column breakdown."""
    return [c.to_dict() for c in current] != [c.to_dict() for c in pulled]

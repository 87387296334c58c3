"""
Classifies the rules of two independently parsed table versions as added,
deleted or modified. Produces a classification only; nothing is merged.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..table_model.table_schema import Rule, TableDocument
from .change_detector import changed_fields, columns_changed, rules_differ
from .rule_index import build_rule_index

ADDED = 'added'
DELETED = 'deleted'
MODIFIED = 'modified'
UNCHANGED = 'unchanged'


@dataclass
class RuleDiff:
    change_type: str
    rule: Rule  # pulled version for added/modified, current version for deleted
    current_rule: Optional[Rule] = None  # only set for modified
    changed_fields: List[str] = field(default_factory=list)

    @property
    def rule_name(self) -> str:
        return self.rule.rule_name

    def to_dict(self) -> Dict:
        d = {
            'type': self.change_type,
            'ruleName': self.rule.rule_name,
            'rule': self.rule.to_dict(),
        }
        if self.current_rule is not None:
            d['currentRule'] = self.current_rule.to_dict()
            d['changedFields'] = list(self.changed_fields)
        return d


@dataclass
class TableDiff:
    added: List[RuleDiff] = field(default_factory=list)
    deleted: List[RuleDiff] = field(default_factory=list)
    modified: List[RuleDiff] = field(default_factory=list)
    columns_changed: bool = False
    diffs: List[RuleDiff] = field(default_factory=list)  # report order
    warnings: Dict[str, int] = field(default_factory=dict)

    @property
    def has_changes(self) -> bool:
        return bool(self.diffs) or self.columns_changed

    @property
    def summary(self) -> Dict[str, Any]:
        return {
            'added': len(self.added),
            'deleted': len(self.deleted),
            'modified': len(self.modified),
            'columnsChanged': self.columns_changed,
        }

    def to_dict(self) -> Dict:
        d = {
            'added': [r.to_dict() for r in self.added],
            'deleted': [r.to_dict() for r in self.deleted],
            'modified': [r.to_dict() for r in self.modified],
            'columnsChanged': self.columns_changed,
            'hasChanges': self.has_changes,
            'summary': self.summary,
        }
        if self.warnings:
            d['warnings'] = self.warnings
        return d


def diff_tables(current: TableDocument, pulled: TableDocument) -> TableDiff:
    """
    Compare ``current`` (local) against ``pulled`` (remote) by rule name.

    Pulled rules with no local counterpart are ADDED, pulled rules whose content
    differs from the local counterpart are MODIFIED, and local rules with no
    pulled counterpart are DELETED. Unchanged rules are not listed.
    """
    current_rules = current.rule_table.rules
    pulled_rules = pulled.rule_table.rules

    current_index, dups_current = build_rule_index(current_rules, 'current')
    pulled_index, dups_pulled = build_rule_index(pulled_rules, 'pulled')

    result = TableDiff()
    if dups_current:
        result.warnings['duplicate_rule_names_current'] = dups_current
    if dups_pulled:
        result.warnings['duplicate_rule_names_pulled'] = dups_pulled

    for pulled_rule in pulled_rules:
        current_rule = current_index.get(pulled_rule.rule_name)
        if current_rule is None:
            diff = RuleDiff(ADDED, pulled_rule)
            result.added.append(diff)
            result.diffs.append(diff)
        elif rules_differ(current_rule, pulled_rule):
            diff = RuleDiff(MODIFIED, pulled_rule, current_rule,
                            changed_fields(current_rule, pulled_rule))
            result.modified.append(diff)
            result.diffs.append(diff)

    for current_rule in current_rules:
        if current_rule.rule_name not in pulled_index:
            diff = RuleDiff(DELETED, current_rule)
            result.deleted.append(diff)
            result.diffs.append(diff)

    result.columns_changed = columns_changed(current.rule_table.columns, pulled.rule_table.columns)
    return result

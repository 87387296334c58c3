from .rule_index import build_rule_index, rule_key
from .change_detector import rules_differ, changed_fields, columns_changed, entry_value
from .table_differ import (
    ADDED, DELETED, MODIFIED, UNCHANGED, RuleDiff, TableDiff, diff_tables,
)
from .resolution import PendingPull, Resolution, review_pull, resolve_pull

__all__ = [
    'build_rule_index', 'rule_key',
    'rules_differ', 'changed_fields', 'columns_changed', 'entry_value',
    'ADDED', 'DELETED', 'MODIFIED', 'UNCHANGED', 'RuleDiff', 'TableDiff', 'diff_tables',
    'PendingPull', 'Resolution', 'review_pull', 'resolve_pull',
]

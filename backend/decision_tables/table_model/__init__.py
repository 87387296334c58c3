from .table_schema import (
    NAME, CONDITION, ACTION, VALID_COLUMN_KINDS,
    Metadata, Column, RuleEntry, Rule, HeaderRows, RuleTable, TableDocument,
)
from .payload_validator import validate_table_payload
from .table_editor import (
    EDIT_OPERATIONS, update_cell, add_column, delete_column, update_column,
    add_rule, delete_rule, duplicate_rule, move_rule,
)
from .rule_grid import build_grid_frame, frame_to_rows, grid_columns

__all__ = [
    'NAME', 'CONDITION', 'ACTION', 'VALID_COLUMN_KINDS',
    'Metadata', 'Column', 'RuleEntry', 'Rule', 'HeaderRows', 'RuleTable', 'TableDocument',
    'validate_table_payload',
    'EDIT_OPERATIONS', 'update_cell', 'add_column', 'delete_column', 'update_column',
    'add_rule', 'delete_rule', 'duplicate_rule', 'move_rule',
    'build_grid_frame', 'frame_to_rows', 'grid_columns',
]

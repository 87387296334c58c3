"""
Decision-table data model as plain dataclasses.

Dict form uses the camelCase keys of the JSON wire format
(``ruleSet``, ``objectBinding``, ``patternTemplate`` ...).
"""
import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..errors import ValidationError


NAME = 'NAME'
CONDITION = 'CONDITION'
ACTION = 'ACTION'

VALID_COLUMN_KINDS = {NAME, CONDITION, ACTION}
ENTRY_KINDS = {CONDITION, ACTION}

DEFAULT_WORKSHEET_NAME = 'Rules'


def column_id_for(index: int) -> str:
    return f'col_{index}'


def rule_id_for(number: int) -> str:
    return f'rule_{number}'


def rule_id_number(rule_id: str) -> Optional[int]:
    """Numeric suffix of a synthetic ``rule_N`` id, or None for foreign ids."""
    prefix, _, suffix = rule_id.rpartition('_')
    if prefix != 'rule' or not suffix.isdigit():
        return None
    return int(suffix)


@dataclass
class Metadata:
    # None means the header marker was absent; '' / [] means present but empty.
    rule_set_name: Optional[str] = None
    imports: Optional[List[str]] = None
    variables: Optional[List[str]] = None
    notes: Optional[str] = None

    def to_dict(self) -> Dict:
        d = {}
        if self.rule_set_name is not None:
            d['ruleSet'] = self.rule_set_name
        if self.imports is not None:
            d['imports'] = list(self.imports)
        if self.variables is not None:
            d['variables'] = list(self.variables)
        if self.notes is not None:
            d['notes'] = self.notes
        return d

    @classmethod
    def from_dict(cls, d: Dict) -> 'Metadata':
        imports = d.get('imports')
        variables = d.get('variables')
        return cls(
            rule_set_name=d.get('ruleSet'),
            imports=list(imports) if imports is not None else None,
            variables=list(variables) if variables is not None else None,
            notes=d.get('notes'),
        )


@dataclass
class Column:
    id: str
    index: int
    kind: str  # stored as read; only NAME/CONDITION/ACTION mean anything downstream
    object_binding: str = ''
    pattern_template: str = ''
    label: str = ''

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'index': self.index,
            'type': self.kind,
            'objectBinding': self.object_binding,
            'patternTemplate': self.pattern_template,
            'label': self.label,
        }

    @classmethod
    def from_dict(cls, d: Dict) -> 'Column':
        index = int(d['index'])
        return cls(
            id=d.get('id') or column_id_for(index),
            index=index,
            kind=d['type'],
            object_binding=d.get('objectBinding', ''),
            pattern_template=d.get('patternTemplate', ''),
            label=d.get('label', f'Column {index}'),
        )


@dataclass
class RuleEntry:
    """One condition/action cell of a rule, with a snapshot of its column header."""
    label: str
    pattern_template: str
    value: str = ''

    def to_dict(self) -> Dict:
        return {'label': self.label, 'patternTemplate': self.pattern_template, 'value': self.value}

    @classmethod
    def from_dict(cls, d: Dict) -> 'RuleEntry':
        return cls(
            label=d.get('label', ''),
            pattern_template=d.get('patternTemplate', ''),
            value=str(d.get('value', '') or ''),
        )

    @classmethod
    def for_column(cls, column: Column, value: str = '') -> 'RuleEntry':
        return cls(label=column.label, pattern_template=column.pattern_template, value=value)


@dataclass
class Rule:
    id: str
    rule_name: str
    conditions: Dict[str, RuleEntry] = field(default_factory=dict)
    actions: Dict[str, RuleEntry] = field(default_factory=dict)
    row_index: Optional[int] = None  # sheet row at extraction time; not used on write

    def entries_for(self, kind: str) -> Optional[Dict[str, RuleEntry]]:
        if kind == CONDITION:
            return self.conditions
        if kind == ACTION:
            return self.actions
        return None

    def content_dict(self) -> Dict:
        """The parts of a rule that identify its content (no id, no row position)."""
        return {
            'ruleName': self.rule_name,
            'conditions': {k: v.to_dict() for k, v in self.conditions.items()},
            'actions': {k: v.to_dict() for k, v in self.actions.items()},
        }

    def to_dict(self) -> Dict:
        d = {'id': self.id}
        if self.row_index is not None:
            d['rowIndex'] = self.row_index
        d.update(self.content_dict())
        return d

    @classmethod
    def from_dict(cls, d: Dict) -> 'Rule':
        return cls(
            id=d['id'],
            rule_name=d['ruleName'],
            conditions={k: RuleEntry.from_dict(v) for k, v in (d.get('conditions') or {}).items()},
            actions={k: RuleEntry.from_dict(v) for k, v in (d.get('actions') or {}).items()},
            row_index=d.get('rowIndex'),
        )


@dataclass
class HeaderRows:
    """Sheet rows of the table block, all derived from the anchor row."""
    start_row: int
    column_types: int
    object_binding: int
    pattern_templates: int
    column_labels: int
    first_rule_row: int

    @classmethod
    def from_anchor(cls, anchor_row: int) -> 'HeaderRows':
        return cls(
            start_row=anchor_row,
            column_types=anchor_row + 1,
            object_binding=anchor_row + 2,
            pattern_templates=anchor_row + 3,
            column_labels=anchor_row + 4,
            first_rule_row=anchor_row + 5,
        )

    def to_dict(self) -> Dict:
        return {
            'columnTypes': self.column_types,
            'objectBinding': self.object_binding,
            'patternTemplates': self.pattern_templates,
            'columnLabels': self.column_labels,
            'firstRuleRow': self.first_rule_row,
        }


@dataclass
class RuleTable:
    name: str
    columns: List[Column] = field(default_factory=list)
    rules: List[Rule] = field(default_factory=list)
    header_rows: HeaderRows = field(default_factory=lambda: HeaderRows.from_anchor(6))
    # Highest rule id number handed out this session, so deleted ids are never reused.
    rule_id_floor: int = field(default=0, compare=False, repr=False)

    def column_by_id(self, column_id: str) -> Optional[Column]:
        return next((c for c in self.columns if c.id == column_id), None)

    def column_at(self, index: int) -> Optional[Column]:
        return next((c for c in self.columns if c.index == index), None)

    def rule_by_id(self, rule_id: str) -> Optional[Rule]:
        return next((r for r in self.rules if r.id == rule_id), None)

    def next_rule_id(self) -> str:
        numbers = [n for n in (rule_id_number(r.id) for r in self.rules) if n is not None]
        self.rule_id_floor = max([self.rule_id_floor] + numbers) + 1
        return rule_id_for(self.rule_id_floor)

    def to_dict(self) -> Dict:
        return {
            'name': self.name,
            'columns': [c.to_dict() for c in self.columns],
            'rules': [r.to_dict() for r in self.rules],
            'startRow': self.header_rows.start_row,
            'headerRows': self.header_rows.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: Dict) -> 'RuleTable':
        columns = sorted((Column.from_dict(c) for c in d.get('columns', [])), key=lambda c: c.index)
        return cls(
            name=d['name'],
            columns=columns,
            rules=[Rule.from_dict(r) for r in d.get('rules', [])],
            header_rows=HeaderRows.from_anchor(int(d.get('startRow') or 6)),
        )


@dataclass
class TableDocument:
    metadata: Metadata
    rule_table: RuleTable
    worksheet_name: str = DEFAULT_WORKSHEET_NAME
    total_rows: Optional[int] = field(default=None, compare=False)
    total_columns: Optional[int] = field(default=None, compare=False)

    def clone(self) -> 'TableDocument':
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        d = {
            'metadata': self.metadata.to_dict(),
            'ruleTable': self.rule_table.to_dict(),
            'worksheetName': self.worksheet_name,
        }
        if self.total_rows is not None:
            d['totalRows'] = self.total_rows
        if self.total_columns is not None:
            d['totalColumns'] = self.total_columns
        return d

    @classmethod
    def from_dict(cls, d: Dict) -> 'TableDocument':
        return cls(
            metadata=Metadata.from_dict(d.get('metadata') or {}),
            rule_table=RuleTable.from_dict(d['ruleTable']),
            worksheet_name=d.get('worksheetName') or DEFAULT_WORKSHEET_NAME,
            total_rows=d.get('totalRows'),
            total_columns=d.get('totalColumns'),
        )

    @classmethod
    def from_payload(cls, payload: Dict) -> 'TableDocument':
        """Build a document from a caller-supplied payload, validating its shape first."""
        from .payload_validator import validate_table_payload

        is_valid, errors = validate_table_payload(payload)
        if not is_valid:
            raise ValidationError(errors[0], errors)
        return cls.from_dict(payload)

"""
Validates caller-supplied table payloads before a TableDocument is built from them.
"""
import re
from typing import Dict, List, Tuple

from .table_schema import VALID_COLUMN_KINDS

INVALID_TITLE_CHARS = re.compile(r'[\\/?*\[\]:]')


def _is_str_list(value) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def validate_metadata(metadata: Dict) -> List[str]:
    errors = []
    if not isinstance(metadata, dict):
        return ["'metadata' must be an object"]

    if not isinstance(metadata.get('ruleSet'), str):
        errors.append("metadata.ruleSet is required (string)")
    for key in ('imports', 'variables'):
        if key in metadata and not _is_str_list(metadata[key]):
            errors.append(f"metadata.{key} must be a list of strings")
    if 'notes' in metadata and not isinstance(metadata['notes'], str):
        errors.append("metadata.notes must be a string")
    return errors


def validate_column(column: Dict, position: int) -> List[str]:
    errors = []
    where = f"ruleTable.columns[{position}]"
    if not isinstance(column, dict):
        return [f"{where} must be an object"]

    if not column.get('id'):
        errors.append(f"{where} missing 'id'")
    index = column.get('index')
    if not isinstance(index, int) or isinstance(index, bool) or index < 1:
        errors.append(f"{where}.index must be an integer >= 1")
    kind = column.get('type')
    if kind not in VALID_COLUMN_KINDS:
        errors.append(f"{where}.type must be one of {sorted(VALID_COLUMN_KINDS)}, got '{kind}'")
    if not isinstance(column.get('label'), str):
        errors.append(f"{where} missing 'label'")
    for key in ('objectBinding', 'patternTemplate'):
        if key in column and not isinstance(column[key], str):
            errors.append(f"{where}.{key} must be a string")
    return errors


def validate_rule(rule: Dict, position: int) -> List[str]:
    errors = []
    where = f"ruleTable.rules[{position}]"
    if not isinstance(rule, dict):
        return [f"{where} must be an object"]

    if not rule.get('id'):
        errors.append(f"{where} missing 'id'")
    if not isinstance(rule.get('ruleName'), str) or not rule['ruleName'].strip():
        errors.append(f"{where} missing 'ruleName'")
    for key in ('conditions', 'actions'):
        entries = rule.get(key, {})
        if not isinstance(entries, dict):
            errors.append(f"{where}.{key} must be an object keyed by column id")
            continue
        for col_id, entry in entries.items():
            if not isinstance(entry, dict) or 'value' not in entry:
                errors.append(f"{where}.{key}['{col_id}'] must be an object with 'value'")
    return errors


def validate_table_payload(payload: Dict) -> Tuple[bool, List[str]]:
    """
    Validate a whole table payload (metadata + ruleTable + optional worksheetName).
    Returns (is_valid, list_of_errors).
    """
    errors = []
    if not isinstance(payload, dict):
        return False, ["Payload must be a JSON object"]

    for k in ('metadata', 'ruleTable'):
        if k not in payload:
            errors.append(f"Missing required key: '{k}'")
    if errors:
        return False, errors

    errors.extend(validate_metadata(payload['metadata']))

    table = payload['ruleTable']
    if not isinstance(table, dict):
        errors.append("'ruleTable' must be an object")
        return False, errors

    if not isinstance(table.get('name'), str) or not table['name'].strip():
        errors.append("ruleTable.name is required")

    columns = table.get('columns')
    if not isinstance(columns, list):
        errors.append("ruleTable.columns must be a list")
        columns = []
    seen_indexes = set()
    for i, column in enumerate(columns):
        errors.extend(validate_column(column, i))
        index = column.get('index') if isinstance(column, dict) else None
        if isinstance(index, int):
            if index in seen_indexes:
                errors.append(f"ruleTable.columns[{i}].index {index} is used by another column")
            seen_indexes.add(index)

    rules = table.get('rules')
    if not isinstance(rules, list):
        errors.append("ruleTable.rules must be a list")
        rules = []
    for i, rule in enumerate(rules):
        errors.extend(validate_rule(rule, i))

    worksheet_name = payload.get('worksheetName')
    if worksheet_name is not None:
        if not isinstance(worksheet_name, str):
            errors.append("worksheetName must be a string")
        elif INVALID_TITLE_CHARS.search(worksheet_name):
            errors.append("worksheetName must not contain any of \\ / ? * [ ] :")

    return len(errors) == 0, errors

"""
Flat grid view of a rule table for the editor: one row per rule, one column per table column.
"""
from typing import Dict, List

import pandas as pd

from .table_schema import NAME, TableDocument

RULE_ID_FIELD = '_ruleId'
RULE_NAME_FIELD = '_ruleName'


def grid_columns(doc: TableDocument) -> List[Dict]:
    """Column definitions in table order: field (column id), header and kind."""
    return [
        {'field': c.id, 'headerName': c.label, 'kind': c.kind, 'index': c.index}
        for c in doc.rule_table.columns
    ]


def build_grid_frame(doc: TableDocument) -> pd.DataFrame:
    """
    DataFrame with ``_ruleId``, ``_ruleName`` and one column per table column id.
    NAME columns show the rule name; columns without an entry for a rule show ''.
    """
    columns = doc.rule_table.columns
    records = []
    for rule in doc.rule_table.rules:
        record = {RULE_ID_FIELD: rule.id, RULE_NAME_FIELD: rule.rule_name}
        for column in columns:
            if column.kind == NAME:
                record[column.id] = rule.rule_name
                continue
            entries = rule.entries_for(column.kind) or {}
            entry = entries.get(column.id)
            record[column.id] = entry.value if entry else ''
        records.append(record)

    field_order = [RULE_ID_FIELD, RULE_NAME_FIELD] + [c.id for c in columns]
    return pd.DataFrame.from_records(records, columns=field_order)


def frame_to_rows(df: pd.DataFrame) -> List[Dict]:
    """Convert a grid DataFrame to JSON-safe row dicts (missing values become '')."""
    return df.fillna('').astype(str).to_dict(orient='records')

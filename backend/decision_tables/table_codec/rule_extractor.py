"""
Reads one rule per sheet row below the header block.
"""
import logging
from typing import List

from ..table_model.table_schema import Column, Rule, RuleEntry, rule_id_for
from .sheet_grid import SheetGrid

logger = logging.getLogger(__name__)


def extract_rules(grid: SheetGrid, first_rule_row: int, columns: List[Column]) -> List[Rule]:
    """
    Scan rows from ``first_rule_row`` to the sheet's row count.

    Rows with a blank rule name in column A are skipped without ending the scan.
    Each condition/action entry copies its column's label and pattern template
    as they are now; later schema edits do not reach back into these copies.
    """
    rules = []

    for row in range(first_rule_row, grid.row_count + 1):
        rule_name = grid.text(row, 1)
        if not rule_name:
            continue

        rule = Rule(id=rule_id_for(row), rule_name=rule_name, row_index=row)

        for column in columns:
            # column 1 holds the rule name itself
            if column.index == 1:
                continue
            entries = rule.entries_for(column.kind)
            if entries is None:
                continue
            entries[column.id] = RuleEntry.for_column(column, grid.text(row, column.index))

        rules.append(rule)

    logger.info(f"Extracted {len(rules)} rules")
    return rules

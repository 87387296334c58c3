"""
Cheap pre-flight check that a workbook looks like a decision table.
Never raises: every failure is reported as an error string.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List

from .layout_locator import RULETABLE_MARKER, SCAN_FIRST_ROW, SCAN_LAST_ROW
from .metadata_extractor import RULESET_MARKER
from .sheet_grid import SheetGrid, load_sheet_grid

logger = logging.getLogger(__name__)


@dataclass
class FormatValidation:
    is_valid: bool
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {'isValid': self.is_valid, 'errors': list(self.errors)}


def validate_grid(grid: SheetGrid) -> FormatValidation:
    errors = []

    if not grid.starts_with('A1', RULESET_MARKER):
        errors.append('Missing or invalid RuleSet declaration in A1')

    table_found = any(
        grid.text(row, 1).startswith(RULETABLE_MARKER)
        for row in range(SCAN_FIRST_ROW, SCAN_LAST_ROW + 1)
    )
    if not table_found:
        errors.append(
            f'RuleTable declaration not found in expected rows ({SCAN_FIRST_ROW}-{SCAN_LAST_ROW})'
        )

    return FormatValidation(is_valid=len(errors) == 0, errors=errors)


def validate_table_bytes(data: bytes) -> FormatValidation:
    """Validate raw .xlsx bytes without building the table model."""
    try:
        grid = load_sheet_grid(data)
        return validate_grid(grid)
    except Exception as e:
        logger.error(f"Error validating decision table format: {e}")
        return FormatValidation(is_valid=False, errors=[f'Validation failed: {e}'])

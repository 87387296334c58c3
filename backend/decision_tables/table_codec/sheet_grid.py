"""
Cell grid accessor: loads the first worksheet of an .xlsx workbook into memory
and addresses it by (row, column) or A1 coordinate. Rows and columns are 1-based.
"""
import io
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, List, Optional, Sequence

import openpyxl
from openpyxl.utils.cell import coordinate_to_tuple

from ..errors import CodecError, FormatError

logger = logging.getLogger(__name__)

TEXT = 'text'
NUMBER = 'number'
EMPTY = 'empty'


@dataclass(frozen=True)
class CellValue:
    kind: str  # 'text' | 'number' | 'empty'
    value: Any = None

    @classmethod
    def of(cls, raw: Any) -> 'CellValue':
        if raw is None:
            return EMPTY_CELL
        if isinstance(raw, bool):
            return cls(TEXT, 'TRUE' if raw else 'FALSE')
        if isinstance(raw, (int, float)):
            if isinstance(raw, float) and (math.isnan(raw) or math.isinf(raw)):
                return EMPTY_CELL
            return cls(NUMBER, raw)
        if isinstance(raw, (datetime, date, time)):
            return cls(TEXT, raw.isoformat())
        text = str(raw)
        if text == '':
            return EMPTY_CELL
        return cls(TEXT, text)

    @property
    def is_empty(self) -> bool:
        return self.kind == EMPTY

    def as_text(self) -> str:
        """Render the cell as a trimmed string; the single coercion every extractor uses."""
        if self.kind == EMPTY:
            return ''
        if self.kind == NUMBER:
            if isinstance(self.value, float) and self.value == int(self.value):
                return str(int(self.value))
            return str(self.value)
        return str(self.value).strip()


EMPTY_CELL = CellValue(EMPTY)


class SheetGrid:
    """Read-only 2-D view over one worksheet's values."""

    def __init__(self, rows: Sequence[Sequence[Any]], title: str = 'Sheet1',
                 row_count: Optional[int] = None, column_count: Optional[int] = None):
        self.title = title
        self._rows: List[List[Any]] = [list(r) for r in rows]
        self.row_count = row_count if row_count is not None else len(self._rows)
        self.column_count = (column_count if column_count is not None
                             else max((len(r) for r in self._rows), default=0))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Any]], title: str = 'Sheet1') -> 'SheetGrid':
        return cls(rows, title=title)

    @classmethod
    def from_worksheet(cls, ws) -> 'SheetGrid':
        rows = [list(r) for r in ws.iter_rows(values_only=True)]
        return cls(rows, title=ws.title, row_count=ws.max_row, column_count=ws.max_column)

    def cell(self, row: int, col: int) -> CellValue:
        if row < 1 or col < 1 or row > len(self._rows):
            return EMPTY_CELL
        values = self._rows[row - 1]
        if col > len(values):
            return EMPTY_CELL
        return CellValue.of(values[col - 1])

    def cell_at(self, coordinate: str) -> CellValue:
        row, col = coordinate_to_tuple(coordinate)
        return self.cell(row, col)

    def text(self, row: int, col: int) -> str:
        return self.cell(row, col).as_text()

    def text_at(self, coordinate: str) -> str:
        return self.cell_at(coordinate).as_text()

    def starts_with(self, coordinate: str, marker: str) -> bool:
        return self.text_at(coordinate).startswith(marker)


def load_sheet_grid(data: bytes) -> SheetGrid:
    """
    Load the first worksheet of an .xlsx payload.

    Raises CodecError when the bytes are not a readable workbook and
    FormatError when the workbook holds no worksheet.
    """
    try:
        # data_only=False keeps cell text as written; formula semantics are not evaluated
        wb = openpyxl.load_workbook(io.BytesIO(data), data_only=False)
    except Exception as e:
        logger.error(f"Could not open workbook: {e}")
        raise CodecError(f"Excel file could not be read: {e}") from e

    try:
        if not wb.worksheets:
            raise FormatError("No worksheet found in Excel file")
        return SheetGrid.from_worksheet(wb.worksheets[0])
    finally:
        wb.close()

"""
Sniffs the layout of an imported sheet: whether row 0 holds column names and whether
row 1 holds units. A row counts as text if any defined cell is not numeric.
"""
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, List, Optional

# Matches what a JavaScript Number() conversion accepts, so sheets sniff the same way
# they do in the browser client.
_DECIMAL = re.compile(r'^[+-]?(\d+\.?\d*([eE][+-]?\d+)?|\.\d+([eE][+-]?\d+)?|Infinity)$')
_RADIX = re.compile(r'^0(x[0-9a-f]+|o[0-7]+|b[01]+)$', re.IGNORECASE)


def excel_col_name(col_index: int) -> str:
    """0 -> A, 25 -> Z, 26 -> AA, 27 -> AB ..."""
    col_name = ''
    while col_index >= 0:
        col_name = chr(col_index % 26 + 65) + col_name
        col_index = col_index // 26 - 1
    return col_name


def is_numeric_value(val: Any) -> bool:
    if isinstance(val, bool):
        return True
    if isinstance(val, (int, float)):
        return not (isinstance(val, float) and math.isnan(val))
    if isinstance(val, (datetime, date, time)):
        return True
    text = str(val).strip()
    if text == '':
        return True
    return bool(_DECIMAL.match(text) or _RADIX.match(text))


def _float_text(val: float) -> str:
    """Shortest round-trip text in Number#toString form: 1e-7, 0.00001, 1.5e+300."""
    text = repr(val)
    if 'e' not in text:
        return text
    mantissa, exponent = text.split('e')
    exponent = int(exponent)
    if -7 < exponent < 21:
        return format(Decimal(text), 'f')
    return f"{mantissa}e{exponent:+d}"


def stringify(val: Any) -> str:
    """String form of a raw cell value; blanks become the empty string."""
    if val is None:
        return ''
    if isinstance(val, bool):
        return 'true' if val else 'false'
    if isinstance(val, float):
        if math.isnan(val):
            return 'NaN'
        if math.isinf(val):
            return 'Infinity' if val > 0 else '-Infinity'
        if val == int(val) and abs(val) < 1e21:
            return str(int(val))
        return _float_text(val)
    if isinstance(val, (datetime, date, time)):
        return val.isoformat()
    return str(val)


def row_has_text(row: List[Any]) -> bool:
    return any(v is not None and not is_numeric_value(v) for v in row)


@dataclass
class SheetLayout:
    header_row: List[str]
    units_row: Optional[List[str]]
    data_start_row: int

    @property
    def has_headers(self) -> bool:
        return self.data_start_row > 0


def detect_layout(rows: List[List[Any]], longest_row: int) -> SheetLayout:
    """
    Decide where the data starts.

    Row 0 is a header row if it contains text. Only then is row 1 checked the same way
    for units. Without headers, columns are named A, B, C ... and data starts at row 0.
    A units row that looks numeric (e.g. bare multipliers) is read as data.
    """
    if not row_has_text(rows[0]):
        return SheetLayout([excel_col_name(j) for j in range(longest_row)], None, 0)

    header_row = [stringify(v) for v in rows[0]]
    if len(rows) > 1 and row_has_text(rows[1]):
        return SheetLayout(header_row, [stringify(v) for v in rows[1]], 2)
    return SheetLayout(header_row, None, 1)

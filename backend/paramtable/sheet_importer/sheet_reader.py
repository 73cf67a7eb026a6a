"""
Decodes an uploaded spreadsheet into a jagged 2D grid of raw cell values (first sheet only).
Blank cells come back as None; trailing blanks are trimmed from each row and trailing
empty rows are dropped, so row lengths reflect the used range. Workbook grids also lose
leading blank rows and columns, so a table placed away from A1 reads the same as one at A1.
"""
import csv
import io
import logging
import math
import os
from typing import Any, List

import openpyxl
import pandas as pd

logger = logging.getLogger(__name__)

SPREADSHEET_EXTENSIONS = ('.csv', '.xlsx', '.ods', '.xls')

Sheet = List[List[Any]]


def _trim_row(row) -> List[Any]:
    values = list(row)
    while values and values[-1] is None:
        values.pop()
    return values


def _trim_grid(rows) -> Sheet:
    grid = [_trim_row(row) for row in rows]
    while grid and not grid[-1]:
        grid.pop()
    return grid


def _strip_leading(grid: Sheet) -> Sheet:
    while grid and not grid[0]:
        grid.pop(0)
    offset = min((next(i for i, v in enumerate(row) if v is not None) for row in grid if row),
                 default=0)
    return [row[offset:] for row in grid]


def _blank_to_none(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, str) and value == '':
        return None
    return value


def read_xlsx_grid(data: bytes) -> Sheet:
    """Read the first worksheet's cached values with openpyxl."""
    wb = openpyxl.load_workbook(io.BytesIO(data), data_only=True, read_only=True)
    try:
        ws = wb.worksheets[0]
        # the used range may start away from A1
        cells = ws.iter_rows(min_row=ws.min_row, min_col=ws.min_column, values_only=True)
        rows = [[_blank_to_none(v) for v in row] for row in cells]
    finally:
        wb.close()
    return _strip_leading(_trim_grid(rows))


def read_csv_grid(data: bytes) -> Sheet:
    """CSV rows may be ragged, so they are tokenized line by line rather than as a frame."""
    text = data.decode('utf-8-sig')
    rows = [[_blank_to_none(v) for v in row] for row in csv.reader(io.StringIO(text))]
    return _trim_grid(rows)


def read_legacy_grid(data: bytes) -> Sheet:
    """.xls and .ods go through pandas (xlrd / odfpy engines)."""
    df = pd.read_excel(io.BytesIO(data), sheet_name=0, header=None)
    rows = [[_blank_to_none(v) for v in row] for row in df.itertuples(index=False, name=None)]
    return _strip_leading(_trim_grid(rows))


def decode_workbook(data: bytes, filename: str) -> Sheet:
    """Decode raw file bytes to a grid, picking the reader from the file extension."""
    ext = os.path.splitext(filename or '')[1].lower()
    if ext not in SPREADSHEET_EXTENSIONS:
        raise ValueError(f"Unsupported spreadsheet type '{ext or filename}'. "
                         f"Supported: {', '.join(SPREADSHEET_EXTENSIONS)}")

    if ext == '.xlsx':
        grid = read_xlsx_grid(data)
    elif ext == '.csv':
        grid = read_csv_grid(data)
    else:
        grid = read_legacy_grid(data)

    logger.info(f"Decoded {filename}: {len(grid)} rows")
    return grid

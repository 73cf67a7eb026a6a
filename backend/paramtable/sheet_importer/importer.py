"""
Rebuilds a parameter table from an imported sheet of unknown shape.

Layout is inferred (header row, units row, label column) and the whole table is replaced.
All checks run before the table is touched, so a rejected sheet leaves it unchanged.
"""
import logging
from typing import Any, List

from ..table_model import FieldKind, MathField
from .header_detector import detect_layout, stringify
from .sheet_reader import decode_workbook

logger = logging.getLogger(__name__)


class SpreadsheetImportError(ValueError):
    """Base class for sheets that cannot be turned into a table."""


class EmptySheetError(SpreadsheetImportError):
    def __init__(self):
        super().__init__('Imported spreadsheet must contain at least one row')


class TooFewColumnsError(SpreadsheetImportError):
    def __init__(self):
        super().__init__('Imported spreadsheet must contain at least two columns '
                         '(one for row labels and one for data)')


class NoDataRowsError(SpreadsheetImportError):
    def __init__(self):
        super().__init__('Imported spreadsheet must contain at least one data row')


def _pad(values: List[str], length: int) -> List[str]:
    return values + [''] * (length - len(values))


def _cell(row: List[Any], col: int) -> Any:
    return row[col] if col < len(row) else None


def populate_table(table, input_rows: List[List[Any]]):
    if len(input_rows) < 1:
        raise EmptySheetError()

    longest_row = max(len(row) for row in input_rows)
    if longest_row < 2:
        raise TooFewColumnsError()

    layout = detect_layout(input_rows, longest_row)
    if len(input_rows) <= layout.data_start_row:
        raise NoDataRowsError()

    # column 0 is the row label column; its header and unit are not kept
    header_row = _pad(layout.header_row, longest_row)
    units_row = _pad(layout.units_row or [], longest_row)
    parameter_headers = header_row[1:]
    parameter_units = units_row[1:]
    data_rows = input_rows[layout.data_start_row:]

    labels = []
    next_row_label_id = 1
    for row in data_rows:
        value = _cell(row, 0)
        labels.append(stringify(value) if value is not None else f"Option {next_row_label_id}")
        next_row_label_id += 1

    parameter_fields = []
    unit_fields = []
    column_kinds = []
    next_parameter_id = 1
    for header, units in zip(parameter_headers, parameter_units):
        if header.strip() == '':
            name = f"Var{next_parameter_id}"
            next_parameter_id += 1
        else:
            name = header
        parameter_fields.append(MathField(name, FieldKind.PARAMETER))
        unit_fields.append(MathField(units, FieldKind.UNITS))
        column_kinds.append(FieldKind.EXPRESSION if units.strip() == '' else FieldKind.NUMBER)

    rhs_fields = []
    for row in data_rows:
        rhs_fields.append([MathField(stringify(_cell(row, col)), column_kinds[col - 1])
                           for col in range(1, longest_row)])

    table.replace_contents(labels, parameter_fields, unit_fields, rhs_fields,
                           next_row_label_id=next_row_label_id,
                           next_parameter_id=next_parameter_id)

    logger.info(f"Imported {len(labels)} rows x {len(parameter_fields)} columns "
                f"(headers={layout.has_headers}, units={layout.units_row is not None})")


def load_file(table, data: bytes, filename: str):
    """Decode an uploaded file and import its first sheet into `table`."""
    if not data:
        raise ValueError('Attempt to load empty file')
    populate_table(table, decode_workbook(data, filename))

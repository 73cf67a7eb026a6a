"""
Writes a parameter table to an .xlsx workbook using openpyxl.
Layout: a header row, a units row, then one row per option with its label in column A,
which the importer reads back as headers plus units.
"""
import io
from typing import Optional

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

LABEL_HEADER = 'Option'
UNITS_HEADER = 'Units'


def _make_header_fill() -> PatternFill:
    return PatternFill(start_color='366092', end_color='366092', fill_type='solid')


def _make_header_font() -> Font:
    return Font(bold=True, color='FFFFFF', name='Calibri', size=11)


def _make_units_fill() -> PatternFill:
    return PatternFill(start_color='D9E1F2', end_color='D9E1F2', fill_type='solid')


def _value(text: str) -> Optional[str]:
    return text if text != '' else None


def build_table_workbook(table, sheet_name: str = 'Table') -> bytes:
    """
    Build an Excel workbook from `table`.

    Returns raw bytes of the .xlsx file.
    """
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = (sheet_name or 'Table')[:31]

    headers = [LABEL_HEADER] + [f.latex for f in table.parameter_fields]
    col_widths = [max(10, len(h)) for h in headers]

    for col_idx, header in enumerate(headers, start=1):
        cell = ws.cell(row=1, column=col_idx, value=_value(header))
        cell.fill = _make_header_fill()
        cell.font = _make_header_font()
        cell.alignment = Alignment(horizontal='center', vertical='center')

    # the units row is always written and labelled, so it is never mistaken for data
    units = [UNITS_HEADER] + [f.latex for f in table.parameter_unit_fields]
    for col_idx, unit in enumerate(units, start=1):
        cell = ws.cell(row=2, column=col_idx, value=_value(unit))
        cell.fill = _make_units_fill()
        cell.font = Font(italic=True)

    row_idx = 3
    for label, rhs_row in zip(table.row_labels, table.rhs_fields):
        ws.cell(row=row_idx, column=1, value=_value(label.label)).font = Font(bold=True)
        col_widths[0] = min(40, max(col_widths[0], len(label.label)))
        for col_idx, field in enumerate(rhs_row, start=2):
            ws.cell(row=row_idx, column=col_idx, value=_value(field.latex))
            col_widths[col_idx - 1] = min(40, max(col_widths[col_idx - 1], len(field.latex)))
        row_idx += 1

    for col_idx, width in enumerate(col_widths, start=1):
        ws.column_dimensions[get_column_letter(col_idx)].width = width + 2

    ws.freeze_panes = 'B2'

    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    return buf.read()

from .sheet_reader import decode_workbook, SPREADSHEET_EXTENSIONS
from .header_detector import excel_col_name, is_numeric_value, stringify, row_has_text, detect_layout, SheetLayout
from .importer import (
    SpreadsheetImportError, EmptySheetError, TooFewColumnsError, NoDataRowsError,
    populate_table, load_file,
)

__all__ = [
    'decode_workbook', 'SPREADSHEET_EXTENSIONS',
    'excel_col_name', 'is_numeric_value', 'stringify', 'row_has_text', 'detect_layout', 'SheetLayout',
    'SpreadsheetImportError', 'EmptySheetError', 'TooFewColumnsError', 'NoDataRowsError',
    'populate_table', 'load_file',
]

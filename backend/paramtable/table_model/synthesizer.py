"""
Builds one equation statement per column for the selected row:
`name = value units`, parsed through the expression engine.
"""
import logging
from typing import List

from .fields import MathField

logger = logging.getLogger(__name__)


def _any_error(fields: List[MathField]) -> bool:
    return any(f.parsing_error for f in fields)


def has_parse_errors(table) -> bool:
    """True if any name, unit or grid cell anywhere in the table failed to parse."""
    return (_any_error(table.parameter_fields) or
            _any_error(table.parameter_unit_fields) or
            any(_any_error(row) for row in table.rhs_fields))


def combined_latex(name: MathField, value: MathField, units: MathField) -> str:
    return name.latex + '=' + value.latex + units.latex


async def synthesize_statements(table, engine) -> list:
    """
    Return the ordered statements for `table.selected_row`.

    A single parse error anywhere in the table yields an empty list. Blank cells in the
    selected row contribute nothing.
    """
    if has_parse_errors(table):
        logger.warning("Skipping table statements: table contains parse errors")
        return []
    if not table.rhs_fields:
        return []

    row = table.rhs_fields[table.selected_row]
    statements = []
    for col, name_field in enumerate(table.parameter_fields):
        value_field = row[col]
        if value_field.is_blank:
            continue
        combined = table.combined_fields[col]
        await combined.parse_latex(
            combined_latex(name_field, value_field, table.parameter_unit_fields[col]), engine)
        if combined.parsing_error:
            logger.warning(f"Column {col} statement {combined.latex!r} failed: {combined.parsing_error_message}")
            continue
        statements.append(combined.statement)

    return statements

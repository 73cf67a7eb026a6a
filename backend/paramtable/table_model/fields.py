"""
Expression fields: a latex text slot plus its parse status and resolved statement.
"""
import logging
import re
from enum import Enum
from typing import Dict, Optional

logger = logging.getLogger(__name__)

SPACING_MARKUP = re.compile(r'\\:?')


class FieldKind(str, Enum):
    PARAMETER = 'parameter'
    UNITS = 'units'
    EXPRESSION = 'expression'
    NUMBER = 'number'
    STATEMENT = 'statement'


def strip_spacing(latex: str) -> str:
    """Drop backslashes and `\\:` spacing markup, then surrounding whitespace."""
    return SPACING_MARKUP.sub('', latex or '').strip()


def kind_for_units(units_latex: str) -> FieldKind:
    """Cells in a column with units hold plain numbers; otherwise any expression."""
    return FieldKind.EXPRESSION if strip_spacing(units_latex) == '' else FieldKind.NUMBER


class MathField:
    def __init__(self, latex: str = '', kind: FieldKind = FieldKind.STATEMENT):
        self.latex = latex
        self.kind = FieldKind(kind)
        self.parse_pending = False
        self.parsing_error = False
        self.parsing_error_message = ''
        self.statement = None

    def __repr__(self):
        return f"MathField({self.latex!r}, {self.kind.value!r})"

    @property
    def is_blank(self) -> bool:
        return strip_spacing(self.latex) == ''

    async def parse_latex(self, latex: str, engine) -> Optional[object]:
        """
        Store `latex` and run it through `engine` with this field's kind.

        Parse failures are recorded on the field, never raised.
        """
        self.latex = latex
        self.parse_pending = True
        try:
            statement, error = await engine.parse(latex, self.kind.value)
        finally:
            self.parse_pending = False

        if error:
            self.parsing_error = True
            self.parsing_error_message = error
            self.statement = None
            logger.debug(f"{self.kind.value} field {latex!r} failed to parse: {error}")
        else:
            self.parsing_error = False
            self.parsing_error_message = ''
            self.statement = statement
        return self.statement

    def to_dict(self) -> Dict:
        return {
            'latex': self.latex,
            'kind': self.kind.value,
            'parsing_error': self.parsing_error,
            'error': self.parsing_error_message or None,
        }

"""
Small local expression engine: LaTeX-ish arithmetic is rewritten to Python syntax and
checked with `ast`. Good enough for validating tables server-side; a full symbolic
engine can be registered alongside it.
"""
import ast
import logging
import re
from typing import Optional, Tuple

from .engine import BaseExpressionEngine, ParseResult, Statement, register_engine

logger = logging.getLogger(__name__)

IDENTIFIER = re.compile(r'^(\\?[A-Za-z][A-Za-z0-9]*)(_\{?[A-Za-z0-9]+\}?)?$')
UNITS_BODY = re.compile(r'^[A-Za-z0-9_*/^().\s%-]+$')
ALLOWED_CONSTANTS = {'pi', 'e'}

_LATEX_REPLACEMENTS = [
    (r'\left', ''), (r'\right', ''),
    (r'\lbrack', '['), (r'\rbrack', ']'),
    (r'\cdot', '*'), (r'\times', '*'),
    (r'\:', ' '), (r'\,', ' '), (r'\;', ' '), ('\\ ', ' '),
]


def normalize(text: str) -> str:
    """Rewrite the supported LaTeX subset into Python expression syntax."""
    out = text
    for old, new in _LATEX_REPLACEMENTS:
        out = out.replace(old, new)
    out = re.sub(r'\\frac\{([^{}]*)\}\{([^{}]*)\}', r'((\1)/(\2))', out)
    out = re.sub(r'_\{([A-Za-z0-9]+)\}', r'_\1', out)
    out = re.sub(r'\\([A-Za-z]+)', r'\1', out)
    out = out.replace('^', '**').replace('{', '(').replace('}', ')')
    out = re.sub(r'\[\s+', '[', re.sub(r'\s+\]', ']', out))
    return out.strip()


def _parse_python(expr: str) -> Optional[ast.Expression]:
    try:
        return ast.parse(expr, mode='eval')
    except SyntaxError:
        return None


def _free_names(tree: ast.AST) -> set:
    return {node.id for node in ast.walk(tree) if isinstance(node, ast.Name)}


def _check_units(units: str) -> Optional[str]:
    body = units.strip()
    if body.startswith('[') and body.endswith(']'):
        body = body[1:-1].strip()
    if not body or not UNITS_BODY.match(body) or not re.search(r'[A-Za-z%]', body):
        return f"Invalid units '{units.strip()}'"
    return None


def _split_units(rhs: str) -> Tuple[Optional[str], str]:
    """Split `rhs` into (expression, trailing units) using the longest parseable prefix."""
    if rhs.endswith(']') and '[' in rhs:
        start = rhs.rindex('[')
        return rhs[:start].strip() or None, rhs[start:]
    for end in range(len(rhs), 0, -1):
        prefix = rhs[:end]
        if prefix.strip() and _parse_python(prefix.strip()) is not None:
            return prefix.strip(), rhs[end:].strip()
    return None, rhs


@register_engine
class BasicExpressionEngine(BaseExpressionEngine):
    name = 'basic'

    async def parse(self, text: str, kind: str) -> ParseResult:
        kind = getattr(kind, 'value', kind)
        handler = getattr(self, f'_parse_{kind}', None)
        if handler is None:
            return None, f"Unsupported field kind '{kind}'"
        statement, error = handler(text)
        logger.debug(f"Parsed {kind} field {text!r}: error={error!r}")
        return statement, error

    def _parse_parameter(self, text: str) -> ParseResult:
        name = text.replace('\\:', '').strip()
        if not name:
            return None, 'Parameter name is required'
        if not IDENTIFIER.match(name):
            return None, f"Invalid parameter name '{name}'"
        return Statement(kind='parameter', text=text, name=normalize(name)), None

    def _parse_units(self, text: str) -> ParseResult:
        units = normalize(text)
        if not units:
            return None, None
        error = _check_units(units)
        if error:
            return None, error
        return Statement(kind='units', text=text, units=units), None

    def _parse_expression(self, text: str, numeric_only: bool = False) -> ParseResult:
        expr = normalize(text)
        if not expr:
            return None, None
        tree = _parse_python(expr)
        if tree is None:
            return None, f"Invalid expression '{text}'"
        if numeric_only and _free_names(tree) - ALLOWED_CONSTANTS:
            return None, 'Only numeric values are allowed in a column with units'
        return Statement(kind='number' if numeric_only else 'expression',
                         text=text, expression=expr), None

    def _parse_number(self, text: str) -> ParseResult:
        return self._parse_expression(text, numeric_only=True)

    def _parse_statement(self, text: str) -> ParseResult:
        if '=' not in text:
            return None, 'Statement must contain an equals sign'
        lhs, rhs = text.split('=', 1)
        name_stmt, error = self._parse_parameter(lhs)
        if error:
            return None, error
        expr, units = _split_units(normalize(rhs))
        if expr is None:
            return None, f"Invalid expression '{rhs.strip()}'"
        if units:
            error = _check_units(units)
            if error:
                return None, error
        return Statement(kind='statement', text=text, name=name_stmt.name,
                         expression=expr, units=units or None), None

from .fields import FieldKind, MathField, strip_spacing, kind_for_units
from .schema import TableSnapshot, SNAPSHOT_KEYS
from .snapshot_validator import validate_snapshot
from .synthesizer import has_parse_errors, synthesize_statements
from .table import TableCell, TableRowLabel

__all__ = [
    'FieldKind', 'MathField', 'strip_spacing', 'kind_for_units',
    'TableSnapshot', 'SNAPSHOT_KEYS', 'validate_snapshot',
    'has_parse_errors', 'synthesize_statements',
    'TableCell', 'TableRowLabel',
]

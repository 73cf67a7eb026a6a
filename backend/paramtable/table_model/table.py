"""
Parameter table model: named options (rows) by named, unit-tagged parameters (columns),
with one expression field per cell.
"""
import logging
from typing import Any, Dict, List, Optional

from ..expression_engine import BaseExpressionEngine, get_engine
from .fields import FieldKind, MathField, kind_for_units
from .schema import TableSnapshot
from .snapshot_validator import validate_snapshot
from .synthesizer import has_parse_errors, synthesize_statements

logger = logging.getLogger(__name__)


def empty_documentation() -> Dict:
    return {'ops': []}


class TableRowLabel:
    """A row label with an identity that survives reordering and deletion of other rows."""

    def __init__(self, label: str, id: int):
        self.label = label
        self.id = id

    def __repr__(self):
        return f"TableRowLabel({self.label!r}, id={self.id})"


class TableCell:
    def __init__(self, snapshot: Optional[TableSnapshot] = None,
                 engine: Optional[BaseExpressionEngine] = None):
        self.engine = engine or get_engine('basic')
        self._next_label_uid = 0
        self.table_statements: List[Any] = []

        if snapshot is None:
            self.row_labels = [self._new_label('Option 1'), self._new_label('Option 2')]
            self.next_row_label_id = 3
            self.parameter_fields = [MathField('Var1', FieldKind.PARAMETER), MathField('Var2', FieldKind.PARAMETER)]
            self.next_parameter_id = 3
            self.combined_fields = [MathField(), MathField()]
            self.parameter_unit_fields = [MathField('', FieldKind.UNITS), MathField('', FieldKind.UNITS)]
            self.rhs_fields = [[MathField('', FieldKind.EXPRESSION), MathField('', FieldKind.EXPRESSION)],
                               [MathField('', FieldKind.EXPRESSION), MathField('', FieldKind.EXPRESSION)]]
            self.selected_row = 0
            self.hide_unselected = False
            self.row_deltas: List[Any] = []
        else:
            self.row_labels = [self._new_label(label) for label in snapshot.row_labels]
            self.next_row_label_id = snapshot.next_row_label_id
            self.parameter_fields = [MathField(latex, FieldKind.PARAMETER) for latex in snapshot.parameter_latexs]
            self.next_parameter_id = snapshot.next_parameter_id
            self.combined_fields = [MathField() for _ in snapshot.parameter_latexs]
            self.parameter_unit_fields = [MathField(latex, FieldKind.UNITS) for latex in snapshot.parameter_unit_latexs]
            self.rhs_fields = [[MathField(latex, FieldKind.EXPRESSION) for latex in row]
                               for row in snapshot.rhs_latexs]
            self.selected_row = snapshot.selected_row
            self.hide_unselected = snapshot.hide_unselected
            self.row_deltas = list(snapshot.row_jsons)

    @classmethod
    def from_dict(cls, d: Dict, engine: Optional[BaseExpressionEngine] = None) -> 'TableCell':
        """Rehydrate from a snapshot dict. Raises ValueError listing every shape problem."""
        is_valid, errors = validate_snapshot(d)
        if not is_valid:
            raise ValueError(f"Invalid table snapshot: {'; '.join(errors)}")
        return cls(TableSnapshot.from_dict(d), engine=engine)

    def _new_label(self, text: str) -> TableRowLabel:
        label = TableRowLabel(text, self._next_label_uid)
        self._next_label_uid += 1
        return label

    # ── Shape ──────────────────────────────────────────────────────────────────

    @property
    def row_count(self) -> int:
        return len(self.row_labels)

    @property
    def column_count(self) -> int:
        return len(self.parameter_fields)

    @property
    def documentation_enabled(self) -> bool:
        return len(self.row_deltas) > 0

    @property
    def parse_pending(self) -> bool:
        return (any(f.parse_pending for f in self.parameter_fields) or
                any(f.parse_pending for f in self.parameter_unit_fields) or
                any(f.parse_pending for row in self.rhs_fields for f in row))

    def _check_row(self, index: int):
        if not 0 <= index < self.row_count:
            raise IndexError(f"Row index {index} out of range (0-{self.row_count - 1})")

    def _check_column(self, index: int):
        if not 0 <= index < self.column_count:
            raise IndexError(f"Column index {index} out of range (0-{self.column_count - 1})")

    # ── Structural mutation ────────────────────────────────────────────────────

    def add_row(self):
        new_row_id = self.next_row_label_id
        self.next_row_label_id += 1

        new_rhs_row = [MathField('', kind_for_units(unit_field.latex))
                       for unit_field in self.parameter_unit_fields]

        self.row_labels = [*self.row_labels, self._new_label(f"Option {new_row_id}")]
        if self.row_deltas:
            self.row_deltas = [*self.row_deltas, empty_documentation()]
        self.rhs_fields = [*self.rhs_fields, new_rhs_row]

    def add_column(self):
        new_var_id = self.next_parameter_id
        self.next_parameter_id += 1

        self.parameter_unit_fields = [*self.parameter_unit_fields, MathField('', FieldKind.UNITS)]
        self.parameter_fields = [*self.parameter_fields, MathField(f"Var{new_var_id}", FieldKind.PARAMETER)]
        self.combined_fields = [*self.combined_fields, MathField()]
        self.rhs_fields = [[*row, MathField('', FieldKind.EXPRESSION)] for row in self.rhs_fields]

    def delete_row(self, row_index: int) -> bool:
        """
        Remove a row. Returns True when the selected row moved as a result, in which
        case callers should re-run `parse_table_statements`.
        """
        self._check_row(row_index)

        self.row_labels = self.row_labels[:row_index] + self.row_labels[row_index + 1:]
        if self.row_deltas:
            self.row_deltas = self.row_deltas[:row_index] + self.row_deltas[row_index + 1:]
        self.rhs_fields = self.rhs_fields[:row_index] + self.rhs_fields[row_index + 1:]

        if self.selected_row >= row_index and self.selected_row != 0:
            self.selected_row -= 1
            return True
        return False

    def delete_column(self, col_index: int):
        self._check_column(col_index)

        self.parameter_unit_fields = self.parameter_unit_fields[:col_index] + self.parameter_unit_fields[col_index + 1:]
        self.parameter_fields = self.parameter_fields[:col_index] + self.parameter_fields[col_index + 1:]
        self.combined_fields = self.combined_fields[:col_index] + self.combined_fields[col_index + 1:]
        self.rhs_fields = [row[:col_index] + row[col_index + 1:] for row in self.rhs_fields]

    def replace_contents(self, labels: List[str], parameter_fields: List[MathField],
                         unit_fields: List[MathField], rhs_fields: List[List[MathField]],
                         next_row_label_id: int, next_parameter_id: int):
        """Swap in a freshly built grid, clearing selection, documentation and statements."""
        self.row_labels = [self._new_label(text) for text in labels]
        self.next_row_label_id = next_row_label_id
        self.parameter_fields = parameter_fields
        self.parameter_unit_fields = unit_fields
        self.combined_fields = [MathField() for _ in parameter_fields]
        self.next_parameter_id = next_parameter_id
        self.rhs_fields = rhs_fields
        self.selected_row = 0
        self.row_deltas = []
        self.table_statements = []

    # ── Documentation ──────────────────────────────────────────────────────────

    def add_row_documentation(self):
        self.row_deltas = [empty_documentation() for _ in self.row_labels]

    def delete_row_documentation(self):
        self.row_deltas = []

    # ── Field edits ────────────────────────────────────────────────────────────

    def set_row_label(self, row_index: int, text: str):
        self._check_row(row_index)
        self.row_labels[row_index].label = text

    def select_row(self, row_index: int) -> bool:
        self._check_row(row_index)
        changed = row_index != self.selected_row
        self.selected_row = row_index
        return changed

    def set_hide_unselected(self, hide: bool):
        if not isinstance(hide, bool):
            raise TypeError(f"hide_unselected must be true or false, got {hide!r}")
        self.hide_unselected = hide

    async def parse_parameter_field(self, latex: str, column: int):
        self._check_column(column)
        await self.parameter_fields[column].parse_latex(latex, self.engine)

    async def parse_rhs_field(self, latex: str, row: int, column: int):
        self._check_row(row)
        self._check_column(column)
        await self.rhs_fields[row][column].parse_latex(latex, self.engine)

    async def parse_unit_field(self, latex: str, column: int):
        self._check_column(column)
        await self.parameter_unit_fields[column].parse_latex(latex, self.engine)

        column_kind = kind_for_units(latex)

        # units change how the values are parsed, so the whole column is parsed again
        for row in self.rhs_fields:
            row[column].kind = column_kind
            await row[column].parse_latex(row[column].latex, self.engine)

    async def parse_table_statements(self) -> list:
        self.table_statements = await synthesize_statements(self, self.engine)
        return self.table_statements

    async def parse_all(self) -> list:
        """Parse every name and unit (re-typing each column), then rebuild statements."""
        for field in self.parameter_fields:
            await field.parse_latex(field.latex, self.engine)
        for col, unit_field in enumerate(self.parameter_unit_fields):
            await self.parse_unit_field(unit_field.latex, col)
        return await self.parse_table_statements()

    # ── Serialization ──────────────────────────────────────────────────────────

    def to_snapshot(self) -> TableSnapshot:
        return TableSnapshot(
            row_labels=[row.label for row in self.row_labels],
            next_row_label_id=self.next_row_label_id,
            parameter_latexs=[f.latex for f in self.parameter_fields],
            next_parameter_id=self.next_parameter_id,
            parameter_unit_latexs=[f.latex for f in self.parameter_unit_fields],
            rhs_latexs=[[f.latex for f in row] for row in self.rhs_fields],
            selected_row=self.selected_row,
            hide_unselected=self.hide_unselected,
            row_jsons=list(self.row_deltas),
        )

    def serialize(self) -> Dict:
        return self.to_snapshot().to_dict()

    def to_view(self) -> Dict:
        """Snapshot plus per-field parse status and the current statements."""
        return {
            **self.serialize(),
            'rowIds': [row.id for row in self.row_labels],
            'parameters': [f.to_dict() for f in self.parameter_fields],
            'units': [f.to_dict() for f in self.parameter_unit_fields],
            'cells': [[f.to_dict() for f in row] for row in self.rhs_fields],
            'hasErrors': has_parse_errors(self),
            'parsePending': self.parse_pending,
            'statements': [s.to_dict() if hasattr(s, 'to_dict') else s for s in self.table_statements],
        }

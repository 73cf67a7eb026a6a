"""
Persisted table snapshot: the exact shape stored with a document and accepted back on load.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List


SNAPSHOT_KEYS = (
    'rowLabels', 'nextRowLabelId', 'parameterLatexs', 'nextParameterId',
    'parameterUnitLatexs', 'rhsLatexs', 'selectedRow', 'hideUnselected', 'rowJsons',
)


@dataclass
class TableSnapshot:
    row_labels: List[str]
    next_row_label_id: int
    parameter_latexs: List[str]
    next_parameter_id: int
    parameter_unit_latexs: List[str]
    rhs_latexs: List[List[str]]
    selected_row: int = 0
    hide_unselected: bool = False
    row_jsons: List[Any] = field(default_factory=list)  # opaque documentation blobs, or empty

    def to_dict(self) -> Dict:
        return {
            'rowLabels': list(self.row_labels),
            'nextRowLabelId': self.next_row_label_id,
            'parameterLatexs': list(self.parameter_latexs),
            'nextParameterId': self.next_parameter_id,
            'parameterUnitLatexs': list(self.parameter_unit_latexs),
            'rhsLatexs': [list(row) for row in self.rhs_latexs],
            'selectedRow': self.selected_row,
            'hideUnselected': self.hide_unselected,
            'rowJsons': list(self.row_jsons),
        }

    @classmethod
    def from_dict(cls, d: Dict) -> 'TableSnapshot':
        return cls(
            row_labels=list(d['rowLabels']),
            next_row_label_id=int(d['nextRowLabelId']),
            parameter_latexs=list(d['parameterLatexs']),
            next_parameter_id=int(d['nextParameterId']),
            parameter_unit_latexs=list(d['parameterUnitLatexs']),
            rhs_latexs=[list(row) for row in d['rhsLatexs']],
            selected_row=int(d.get('selectedRow', 0)),
            hide_unselected=bool(d.get('hideUnselected', False)),
            row_jsons=list(d.get('rowJsons', [])),
        )

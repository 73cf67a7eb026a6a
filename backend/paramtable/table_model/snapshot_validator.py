"""
Validates snapshot dicts before a table is rehydrated from them.
"""
from typing import Dict, List, Tuple

from .schema import SNAPSHOT_KEYS


def _is_str_list(value) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def validate_snapshot(snapshot: Dict) -> Tuple[bool, List[str]]:
    """
    Validate a snapshot dict. Returns (is_valid, list_of_errors).
    """
    errors = []

    if not isinstance(snapshot, dict):
        return False, ['Snapshot must be a JSON object']

    for k in SNAPSHOT_KEYS:
        if k not in snapshot:
            errors.append(f"Missing required key: '{k}'")
    if errors:
        return False, errors

    for k in ('rowLabels', 'parameterLatexs', 'parameterUnitLatexs'):
        if not _is_str_list(snapshot[k]):
            errors.append(f"'{k}' must be a list of strings")

    for k in ('nextRowLabelId', 'nextParameterId', 'selectedRow'):
        if not isinstance(snapshot[k], int) or isinstance(snapshot[k], bool):
            errors.append(f"'{k}' must be an integer")

    if not isinstance(snapshot['hideUnselected'], bool):
        errors.append("'hideUnselected' must be a boolean")

    rhs = snapshot['rhsLatexs']
    if not isinstance(rhs, list) or not all(_is_str_list(row) for row in rhs):
        errors.append("'rhsLatexs' must be a list of lists of strings")

    if not isinstance(snapshot['rowJsons'], list):
        errors.append("'rowJsons' must be a list")

    if errors:
        return False, errors

    row_count = len(snapshot['rowLabels'])
    col_count = len(snapshot['parameterLatexs'])

    if len(snapshot['parameterUnitLatexs']) != col_count:
        errors.append(f"'parameterUnitLatexs' has {len(snapshot['parameterUnitLatexs'])} entries, expected {col_count}")

    if len(rhs) != row_count:
        errors.append(f"'rhsLatexs' has {len(rhs)} rows, expected {row_count}")
    for i, row in enumerate(rhs):
        if len(row) != col_count:
            errors.append(f"rhsLatexs[{i}] has {len(row)} cells, expected {col_count}")

    row_jsons = snapshot['rowJsons']
    if row_jsons and len(row_jsons) != row_count:
        errors.append(f"'rowJsons' must be empty or have {row_count} entries, got {len(row_jsons)}")

    if not 0 <= snapshot['selectedRow'] < max(row_count, 1):
        errors.append(f"'selectedRow' {snapshot['selectedRow']} is out of range")

    return len(errors) == 0, errors

import pytest

from paramtable.table_model import FieldKind, TableCell, kind_for_units, strip_spacing


def assert_aligned(table):
    assert len(table.row_labels) == len(table.rhs_fields)
    if table.row_deltas:
        assert len(table.row_deltas) == len(table.row_labels)
    n_cols = len(table.parameter_fields)
    assert len(table.parameter_unit_fields) == n_cols
    assert len(table.combined_fields) == n_cols
    for row in table.rhs_fields:
        assert len(row) == n_cols
    ids = [label.id for label in table.row_labels]
    assert ids == sorted(ids)
    assert len(set(ids)) == len(ids)


def test_default_table():
    table = TableCell()
    assert [label.label for label in table.row_labels] == ['Option 1', 'Option 2']
    assert [f.latex for f in table.parameter_fields] == ['Var1', 'Var2']
    assert table.next_row_label_id == 3
    assert table.next_parameter_id == 3
    assert table.selected_row == 0
    assert table.hide_unselected is False
    assert table.row_deltas == []
    assert all(f.kind == FieldKind.EXPRESSION for row in table.rhs_fields for f in row)
    assert_aligned(table)


def test_add_row_uses_counter_and_unit_kinds(table):
    table.parameter_unit_fields[0].latex = 'm'
    table.add_row()

    assert table.row_labels[-1].label == 'Option 3'
    assert table.next_row_label_id == 4
    new_row = table.rhs_fields[-1]
    assert [f.latex for f in new_row] == ['', '']
    assert new_row[0].kind == FieldKind.NUMBER
    assert new_row[1].kind == FieldKind.EXPRESSION
    assert_aligned(table)


def test_add_row_ignores_spacing_only_units(table):
    table.parameter_unit_fields[1].latex = '\\: \\:'
    table.add_row()
    assert table.rhs_fields[-1][1].kind == FieldKind.EXPRESSION


def test_add_column_on_table_with_units(table):
    table.parameter_unit_fields[0].latex = 'kg'
    for row in table.rhs_fields:
        row[0].kind = FieldKind.NUMBER

    table.add_column()

    assert [f.latex for f in table.parameter_fields] == ['Var1', 'Var2', 'Var3']
    assert table.parameter_unit_fields[-1].latex == ''
    assert table.next_parameter_id == 4
    for row in table.rhs_fields:
        assert row[-1].kind == FieldKind.EXPRESSION
        assert row[-1].latex == ''
        assert row[0].kind == FieldKind.NUMBER
    assert_aligned(table)


def test_delete_first_row_keeps_selection_at_zero(table):
    assert table.delete_row(0) is False
    assert table.selected_row == 0
    assert [label.label for label in table.row_labels] == ['Option 2']


def test_delete_row_before_selection_moves_selection(table):
    table.add_row()
    table.add_row()
    table.selected_row = 2

    assert table.delete_row(1) is True
    assert table.selected_row == 1
    assert [label.label for label in table.row_labels] == ['Option 1', 'Option 3', 'Option 4']


def test_delete_row_after_selection_leaves_selection(table):
    table.add_row()
    table.selected_row = 1
    assert table.delete_row(2) is False
    assert table.selected_row == 1


def test_delete_row_keeps_documentation_aligned(table):
    table.add_row_documentation()
    table.row_deltas[1] = {'ops': [{'insert': 'second\n'}]}
    table.add_row()
    assert len(table.row_deltas) == 3

    table.delete_row(0)
    assert table.row_deltas[0] == {'ops': [{'insert': 'second\n'}]}
    assert_aligned(table)

    table.delete_row_documentation()
    table.add_row()
    assert table.row_deltas == []


def test_delete_column_removes_every_parallel_entry(table):
    table.add_column()
    table.rhs_fields[0][1].latex = 'middle'
    table.delete_column(1)

    assert [f.latex for f in table.parameter_fields] == ['Var1', 'Var3']
    assert all(f.latex != 'middle' for row in table.rhs_fields for f in row)
    assert_aligned(table)


def test_delete_out_of_range_raises(table):
    with pytest.raises(IndexError):
        table.delete_row(2)
    with pytest.raises(IndexError):
        table.delete_row(-1)
    with pytest.raises(IndexError):
        table.delete_column(5)
    assert_aligned(table)


def test_shape_holds_over_mixed_operations(table):
    table.add_row_documentation()
    ops = [
        table.add_row, table.add_column, lambda: table.delete_row(0), table.add_column,
        lambda: table.delete_column(0), table.add_row, table.add_row,
        lambda: table.delete_row(2), lambda: table.delete_column(1), table.add_row,
    ]
    for op in ops:
        op()
        assert_aligned(table)


def test_row_ids_never_reused(table):
    seen = [label.id for label in table.row_labels]
    for _ in range(3):
        table.add_row()
        seen.append(table.row_labels[-1].id)
        table.delete_row(table.row_count - 1)
    table.add_row()
    seen.append(table.row_labels[-1].id)

    assert seen == sorted(seen)
    assert len(set(seen)) == len(seen)
    assert table.next_row_label_id == 7


def test_select_row_and_labels(table):
    assert table.select_row(1) is True
    assert table.select_row(1) is False
    table.set_row_label(1, 'Steel')
    assert table.row_labels[1].label == 'Steel'
    with pytest.raises(IndexError):
        table.select_row(3)


def test_hide_unselected_rejects_non_boolean(table):
    table.set_hide_unselected(True)
    assert table.hide_unselected is True
    with pytest.raises(TypeError):
        table.set_hide_unselected('false')
    assert table.hide_unselected is True


def test_snapshot_round_trip(table):
    table.add_row()
    table.add_column()
    table.parameter_unit_fields[0].latex = 'm'
    table.rhs_fields[2][2].latex = 'x^2'
    table.set_hide_unselected(True)
    table.add_row_documentation()

    snapshot = table.serialize()
    restored = TableCell.from_dict(snapshot)

    assert restored.serialize() == snapshot
    assert snapshot['rowLabels'] == ['Option 1', 'Option 2', 'Option 3']
    assert snapshot['rhsLatexs'][2] == ['', '', 'x^2']
    assert snapshot['rowJsons'] == [{'ops': []}] * 3
    assert_aligned(restored)


def test_from_dict_rejects_misaligned_snapshot(table):
    snapshot = table.serialize()
    snapshot['rhsLatexs'][0].append('extra')
    with pytest.raises(ValueError, match='rhsLatexs'):
        TableCell.from_dict(snapshot)


def test_spacing_helpers():
    assert strip_spacing(' \\:\\: ') == ''
    assert kind_for_units('') == FieldKind.EXPRESSION
    assert kind_for_units('\\:') == FieldKind.EXPRESSION
    assert kind_for_units('m') == FieldKind.NUMBER

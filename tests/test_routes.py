import io

from openpyxl import load_workbook


def _create(client, snapshot=None):
    resp = client.post('/api/tables', json=snapshot) if snapshot else client.post('/api/tables')
    assert resp.status_code == 201
    return resp.get_json()


def test_create_default_table(test_client):
    body = _create(test_client)
    assert body['rowLabels'] == ['Option 1', 'Option 2']
    assert body['parameterLatexs'] == ['Var1', 'Var2']
    assert body['hasErrors'] is False
    assert body['statements'] == []

    resp = test_client.get(f"/api/tables/{body['table_id']}")
    assert resp.status_code == 200
    assert resp.get_json()['nextRowLabelId'] == 3


def test_unknown_table(test_client):
    resp = test_client.get('/api/tables/missing')
    assert resp.status_code == 404
    assert resp.get_json() == {'error': 'Table not found'}


def test_invalid_snapshot_rejected(test_client):
    resp = test_client.post('/api/tables', json={'rowLabels': ['a']})
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Invalid table snapshot'


def test_structure_edits(test_client):
    table_id = _create(test_client)['table_id']

    assert test_client.post(f'/api/tables/{table_id}/rows').status_code == 201
    assert test_client.post(f'/api/tables/{table_id}/columns').status_code == 201
    body = test_client.put(f'/api/tables/{table_id}/selection', json={'selected_row': 2}).get_json()
    assert body['selectedRow'] == 2

    body = test_client.delete(f'/api/tables/{table_id}/rows/0').get_json()
    assert body['selectedRow'] == 1
    assert body['rowLabels'] == ['Option 2', 'Option 3']
    assert body['parameterLatexs'] == ['Var1', 'Var2', 'Var3']

    body = test_client.delete(f'/api/tables/{table_id}/columns/1').get_json()
    assert body['parameterLatexs'] == ['Var1', 'Var3']
    assert all(len(row) == 2 for row in body['rhsLatexs'])

    resp = test_client.delete(f'/api/tables/{table_id}/rows/9')
    assert resp.status_code == 400


def test_field_edits_produce_statements(test_client):
    table_id = _create(test_client)['table_id']

    test_client.put(f'/api/tables/{table_id}/units/0', json={'latex': 'm'})
    body = test_client.put(f'/api/tables/{table_id}/cells/0/0', json={'latex': '3'}).get_json()
    assert body['cells'][0][0]['kind'] == 'number'
    assert body['statements'] == [
        {'kind': 'statement', 'text': 'Var1=3m', 'name': 'Var1', 'expression': '3', 'units': 'm'},
    ]

    body = test_client.put(f'/api/tables/{table_id}/cells/1/1', json={'latex': '3+'}).get_json()
    assert body['hasErrors'] is True
    assert body['cells'][1][1]['parsing_error'] is True
    assert body['statements'] == []

    resp = test_client.put(f'/api/tables/{table_id}/cells/0/0', json={})
    assert resp.status_code == 400


def test_import_and_export(test_client, make_xlsx):
    table_id = _create(test_client)['table_id']
    data = make_xlsx([['Label', 'x', 'y'], [None, 'm', 'kg'], ['a', 1, 2], ['b', 3, 4]])

    resp = test_client.post(f'/api/tables/{table_id}/import',
                            data={'file': (io.BytesIO(data), 'sheet.xlsx')},
                            content_type='multipart/form-data')
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['rowLabels'] == ['a', 'b']
    assert body['parameterUnitLatexs'] == ['m', 'kg']
    assert [s['text'] for s in body['statements']] == ['x=1m', 'y=2kg']

    resp = test_client.get(f'/api/tables/{table_id}/export')
    assert resp.status_code == 200
    wb = load_workbook(io.BytesIO(resp.data))
    assert [c.value for c in wb.active[1]] == ['Option', 'x', 'y']


def test_import_rejects_single_column(test_client, make_xlsx):
    created = _create(test_client)
    table_id = created['table_id']

    resp = test_client.post(f'/api/tables/{table_id}/import',
                            data={'file': (io.BytesIO(make_xlsx([['h1'], ['a']])), 'sheet.xlsx')},
                            content_type='multipart/form-data')
    assert resp.status_code == 400
    assert 'two columns' in resp.get_json()['error']

    body = test_client.get(f'/api/tables/{table_id}').get_json()
    assert body['rowLabels'] == created['rowLabels']


def test_documentation_toggle(test_client):
    table_id = _create(test_client)['table_id']
    body = test_client.post(f'/api/tables/{table_id}/documentation').get_json()
    assert body['rowJsons'] == [{'ops': []}, {'ops': []}]
    body = test_client.delete(f'/api/tables/{table_id}/documentation').get_json()
    assert body['rowJsons'] == []


def test_deleting_selected_first_row_rebuilds_statements(test_client):
    table_id = _create(test_client)['table_id']
    test_client.put(f'/api/tables/{table_id}/cells/0/0', json={'latex': '1'})
    body = test_client.put(f'/api/tables/{table_id}/cells/1/0', json={'latex': '2'}).get_json()
    assert [s['text'] for s in body['statements']] == ['Var1=1']

    body = test_client.delete(f'/api/tables/{table_id}/rows/0').get_json()
    assert body['selectedRow'] == 0
    assert body['rhsLatexs'] == [['2', '']]
    assert [s['text'] for s in body['statements']] == ['Var1=2']


def test_hide_unselected_must_be_boolean(test_client):
    table_id = _create(test_client)['table_id']

    resp = test_client.put(f'/api/tables/{table_id}/selection',
                           json={'selected_row': 1, 'hide_unselected': 'false'})
    assert resp.status_code == 400
    body = test_client.get(f'/api/tables/{table_id}').get_json()
    assert body['selectedRow'] == 0
    assert body['hideUnselected'] is False

    body = test_client.put(f'/api/tables/{table_id}/selection', json={'hide_unselected': True}).get_json()
    assert body['hideUnselected'] is True

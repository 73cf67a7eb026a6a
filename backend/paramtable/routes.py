"""
Flask Blueprint for parameter tables.
Registers all /api/tables/* endpoints.
"""
import asyncio
import io
import logging
import os
import threading
import time
import uuid
from datetime import datetime
from typing import Dict, Optional

from flask import Blueprint, current_app, jsonify, request, send_file
from extensions import limiter

from .expression_engine import get_engine
from .output_builder import build_table_workbook
from .sheet_importer import SPREADSHEET_EXTENSIONS, SpreadsheetImportError, load_file
from .table_model import TableCell, validate_snapshot, TableSnapshot

logger = logging.getLogger(__name__)

tables_bp = Blueprint('tables', __name__, url_prefix='/api/tables')

# ── In-memory table store ──────────────────────────────────────────────────────
_tables: Dict[str, Dict] = {}
_tables_lock = threading.Lock()
TABLE_TTL_SECONDS = int(os.environ.get('TABLE_TTL_SECONDS', 3600))


def _cleanup_tables():
    """Background thread: drop tables that have not been touched within the TTL."""
    while True:
        time.sleep(300)
        now = time.time()
        with _tables_lock:
            expired = [tid for tid, t in _tables.items()
                       if now - t.get('touched_at', 0) > TABLE_TTL_SECONDS]
            for tid in expired:
                _tables.pop(tid, None)
        if expired:
            logger.info(f"Cleaned up {len(expired)} expired tables")


threading.Thread(target=_cleanup_tables, daemon=True).start()


def _get_entry(table_id: str) -> Optional[Dict]:
    with _tables_lock:
        entry = _tables.get(table_id)
        if entry:
            entry['touched_at'] = time.time()
        return entry


def _put_table(table: TableCell) -> str:
    table_id = str(uuid.uuid4())
    with _tables_lock:
        _tables[table_id] = {'table': table, 'lock': threading.Lock(), 'touched_at': time.time()}
    return table_id


def _engine():
    return get_engine(current_app.config.get('EXPRESSION_ENGINE', 'basic'))


def _view(table_id: str, table: TableCell, status: int = 200):
    return jsonify({'table_id': table_id, **table.to_view()}), status


def _not_found():
    return jsonify({'error': 'Table not found'}), 404


def _json_body() -> Dict:
    return request.get_json(silent=True) or {}


# ── Endpoints ─────────────────────────────────────────────────────────────────

@tables_bp.route('', methods=['POST'])
def create_table():
    """
    Create a table. With an empty body a default two-by-two table is created;
    otherwise the body is a persisted snapshot to rehydrate.
    """
    body = _json_body()
    if body:
        is_valid, errors = validate_snapshot(body)
        if not is_valid:
            return jsonify({'error': 'Invalid table snapshot', 'details': errors}), 400
        table = TableCell(TableSnapshot.from_dict(body), engine=_engine())
    else:
        table = TableCell(engine=_engine())

    asyncio.run(table.parse_all())
    table_id = _put_table(table)
    logger.info(f"Created table {table_id} ({table.row_count} rows x {table.column_count} columns)")
    return _view(table_id, table, 201)


@tables_bp.route('/<table_id>', methods=['GET'])
def get_table(table_id):
    entry = _get_entry(table_id)
    if not entry:
        return _not_found()
    return _view(table_id, entry['table'])


@tables_bp.route('/<table_id>', methods=['DELETE'])
def delete_table(table_id):
    with _tables_lock:
        entry = _tables.pop(table_id, None)
    if not entry:
        return _not_found()
    return jsonify({'table_id': table_id, 'message': 'Table deleted'})


@tables_bp.route('/<table_id>/rows', methods=['POST'])
def add_row(table_id):
    entry = _get_entry(table_id)
    if not entry:
        return _not_found()
    table = entry['table']
    with entry['lock']:
        table.add_row()
    return _view(table_id, table, 201)


@tables_bp.route('/<table_id>/rows/<int:row_index>', methods=['DELETE'])
def delete_row(table_id, row_index):
    entry = _get_entry(table_id)
    if not entry:
        return _not_found()
    table = entry['table']
    with entry['lock']:
        try:
            table.delete_row(row_index)
        except IndexError as e:
            return jsonify({'error': str(e)}), 400
        # a different row may now sit under the selection even if its index did not move
        asyncio.run(table.parse_table_statements())
    return _view(table_id, table)


@tables_bp.route('/<table_id>/rows/<int:row_index>/label', methods=['PUT'])
def set_row_label(table_id, row_index):
    entry = _get_entry(table_id)
    if not entry:
        return _not_found()
    body = _json_body()
    if 'label' not in body:
        return jsonify({'error': 'label is required'}), 400
    table = entry['table']
    with entry['lock']:
        try:
            table.set_row_label(row_index, str(body['label']))
        except IndexError as e:
            return jsonify({'error': str(e)}), 400
    return _view(table_id, table)


@tables_bp.route('/<table_id>/columns', methods=['POST'])
def add_column(table_id):
    entry = _get_entry(table_id)
    if not entry:
        return _not_found()
    table = entry['table']
    with entry['lock']:
        table.add_column()
        asyncio.run(table.parse_parameter_field(table.parameter_fields[-1].latex, table.column_count - 1))
    return _view(table_id, table, 201)


@tables_bp.route('/<table_id>/columns/<int:col_index>', methods=['DELETE'])
def delete_column(table_id, col_index):
    entry = _get_entry(table_id)
    if not entry:
        return _not_found()
    table = entry['table']
    with entry['lock']:
        try:
            table.delete_column(col_index)
        except IndexError as e:
            return jsonify({'error': str(e)}), 400
        asyncio.run(table.parse_table_statements())
    return _view(table_id, table)


@tables_bp.route('/<table_id>/parameters/<int:col_index>', methods=['PUT'])
def set_parameter(table_id, col_index):
    return _edit_field(table_id, lambda table, latex: table.parse_parameter_field(latex, col_index))


@tables_bp.route('/<table_id>/units/<int:col_index>', methods=['PUT'])
def set_units(table_id, col_index):
    return _edit_field(table_id, lambda table, latex: table.parse_unit_field(latex, col_index))


@tables_bp.route('/<table_id>/cells/<int:row_index>/<int:col_index>', methods=['PUT'])
def set_cell(table_id, row_index, col_index):
    return _edit_field(table_id, lambda table, latex: table.parse_rhs_field(latex, row_index, col_index))


def _edit_field(table_id: str, parse):
    """Apply a field edit (body: {latex}) and rebuild the statements."""
    entry = _get_entry(table_id)
    if not entry:
        return _not_found()
    body = _json_body()
    if 'latex' not in body:
        return jsonify({'error': 'latex is required'}), 400
    table = entry['table']

    async def edit():
        await parse(table, str(body['latex']))
        await table.parse_table_statements()

    with entry['lock']:
        try:
            asyncio.run(edit())
        except IndexError as e:
            return jsonify({'error': str(e)}), 400
    return _view(table_id, table)


@tables_bp.route('/<table_id>/selection', methods=['PUT'])
def select_row(table_id):
    entry = _get_entry(table_id)
    if not entry:
        return _not_found()
    body = _json_body()
    if 'hide_unselected' in body and not isinstance(body['hide_unselected'], bool):
        return jsonify({'error': 'hide_unselected must be true or false'}), 400
    table = entry['table']
    with entry['lock']:
        try:
            if 'selected_row' in body:
                table.select_row(int(body['selected_row']))
            if 'hide_unselected' in body:
                table.set_hide_unselected(body['hide_unselected'])
        except (IndexError, TypeError, ValueError) as e:
            return jsonify({'error': str(e)}), 400
        asyncio.run(table.parse_table_statements())
    return _view(table_id, table)


@tables_bp.route('/<table_id>/documentation', methods=['POST', 'DELETE'])
def row_documentation(table_id):
    entry = _get_entry(table_id)
    if not entry:
        return _not_found()
    table = entry['table']
    with entry['lock']:
        if request.method == 'POST':
            table.add_row_documentation()
        else:
            table.delete_row_documentation()
    return _view(table_id, table)


@tables_bp.route('/<table_id>/statements', methods=['GET'])
def get_statements(table_id):
    entry = _get_entry(table_id)
    if not entry:
        return _not_found()
    table = entry['table']
    with entry['lock']:
        statements = asyncio.run(table.parse_table_statements())
    return jsonify({
        'table_id': table_id,
        'selected_row': table.selected_row,
        'statements': [s.to_dict() for s in statements],
    })


@tables_bp.route('/<table_id>/import', methods=['POST'])
@limiter.limit("30 per minute;300 per day")
def import_spreadsheet(table_id):
    """Replace the table with the contents of an uploaded spreadsheet (form field 'file')."""
    entry = _get_entry(table_id)
    if not entry:
        return _not_found()

    f = request.files.get('file')
    if not f:
        return jsonify({'error': 'No file uploaded'}), 400
    if not f.filename.lower().endswith(SPREADSHEET_EXTENSIONS):
        return jsonify({'error': f"Only {', '.join(SPREADSHEET_EXTENSIONS)} files supported"}), 400

    table = entry['table']
    with entry['lock']:
        try:
            load_file(table, f.read(), f.filename)
        except SpreadsheetImportError as e:
            logger.warning(f"Rejected import of {f.filename} into {table_id}: {e}")
            return jsonify({'error': str(e)}), 400
        except ValueError as e:
            return jsonify({'error': str(e)}), 400
        except Exception as e:
            logger.error(f"Import failed for {f.filename}: {e}")
            return jsonify({'error': f'Failed to read {f.filename}: {str(e)}'}), 500
        asyncio.run(table.parse_all())

    logger.info(f"Imported {f.filename} into table {table_id}")
    return _view(table_id, table)


@tables_bp.route('/<table_id>/export', methods=['GET'])
def export_spreadsheet(table_id):
    """Download the table as an .xlsx workbook."""
    entry = _get_entry(table_id)
    if not entry:
        return _not_found()

    with entry['lock']:
        try:
            report_bytes = build_table_workbook(entry['table'])
        except Exception as e:
            logger.error(f"Export failed for {table_id}: {e}")
            return jsonify({'error': f'Export failed: {str(e)}'}), 500

    date_str = datetime.now().strftime('%Y%m%d')
    return send_file(
        io.BytesIO(report_bytes),
        mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        as_attachment=True,
        download_name=f'table_{date_str}.xlsx',
    )

"""
Flask Blueprint for decision-table files and editing sessions.
Registers all /api/tables/* endpoints.
"""
import io
import logging
from datetime import datetime

from flask import Blueprint, jsonify, request, send_file

from . import session_store
from .editing_session import EditingSession
from .errors import ValidationError
from .output_builder import build_diff_report
from .reconciliation import Resolution
from .responses import error_json, register_error_handlers, timestamp
from .table_codec import parse_table_bytes, serialize_table, validate_table_bytes
from .table_model import TableDocument, build_grid_frame, frame_to_rows, grid_columns

logger = logging.getLogger(__name__)

tables_bp = Blueprint('tables', __name__, url_prefix='/api/tables')
register_error_handlers(tables_bp)

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
ALLOWED_EXTENSIONS = ('.xlsx', '.xlsm')


def _read_upload(field: str = 'excelFile'):
    """Return (bytes, filename, error response); the error is None when the upload is usable."""
    f = request.files.get(field)
    if not f or not f.filename:
        return None, None, error_json('No file uploaded', 'Please select an Excel file to upload', 400)
    if not f.filename.lower().endswith(ALLOWED_EXTENSIONS):
        return None, None, error_json('Upload Error', 'Only Excel files (.xlsx) are allowed', 400)
    return f.read(), f.filename, None


def _session_or_404(session_id: str):
    session = session_store.get_session(session_id)
    if session is None:
        return None, error_json('Not Found', 'Session expired or not found', 404)
    return session, None


def _xlsx_response(data: bytes, filename: str):
    return send_file(
        io.BytesIO(data),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name=filename,
    )


# ── Stateless file endpoints ──────────────────────────────────────────────────

@tables_bp.route('/validate', methods=['POST'])
def validate():
    """Pre-flight format check; always 200 with {isValid, errors}."""
    data, _, err = _read_upload()
    if err:
        return err
    return jsonify({'validation': validate_table_bytes(data).to_dict(), 'timestamp': timestamp()})


@tables_bp.route('/upload', methods=['POST'])
def upload():
    """
    Upload a decision-table workbook. The format check runs first; a passing
    file is parsed into a new editing session.
    """
    data, filename, err = _read_upload()
    if err:
        return err

    logger.info(f"File uploaded: {filename} ({len(data)} bytes)")
    validation = validate_table_bytes(data)
    response = {
        'message': 'File uploaded successfully',
        'file': {'originalName': filename, 'size': len(data)},
        'validation': validation.to_dict(),
        'timestamp': timestamp(),
    }
    if not validation.is_valid:
        return jsonify(response)

    doc = parse_table_bytes(data)
    session_id = session_store.create_session(EditingSession(doc))
    response.update({'session_id': session_id, 'data': doc.to_dict()})
    return jsonify(response)


@tables_bp.route('/parse', methods=['POST'])
def parse():
    """Parse an uploaded workbook and return the table document without opening a session."""
    data, _, err = _read_upload()
    if err:
        return err
    doc = parse_table_bytes(data)
    return jsonify({'message': 'Excel file parsed successfully', 'data': doc.to_dict(), 'timestamp': timestamp()})


@tables_bp.route('/generate', methods=['POST'])
def generate():
    """Build a workbook from a table payload and return it as a download."""
    body = request.get_json(silent=True)
    if not body:
        return error_json('Validation Error', 'Request body required (JSON)', 400)

    doc = TableDocument.from_payload(body)
    data = serialize_table(doc)
    filename = f'generated-rules-{datetime.now().strftime("%Y%m%d%H%M%S")}.xlsx'
    logger.info(f"Excel file generated: {filename}")
    return _xlsx_response(data, filename)


# ── Editing sessions ──────────────────────────────────────────────────────────

@tables_bp.route('/session', methods=['POST'])
def create_session():
    """Open a session on a new table built from a payload."""
    body = request.get_json(silent=True)
    if not body:
        return error_json('Validation Error', 'Request body required (JSON)', 400)
    doc = TableDocument.from_payload(body)
    session = EditingSession(doc)
    session_id = session_store.create_session(session)
    return jsonify({'session_id': session_id, **session.to_dict()}), 201


@tables_bp.route('/session/<session_id>', methods=['GET'])
def get_session(session_id):
    session, err = _session_or_404(session_id)
    if err:
        return err
    return jsonify({'session_id': session_id, **session.to_dict()})


@tables_bp.route('/session/<session_id>', methods=['DELETE'])
def close_session(session_id):
    if not session_store.delete_session(session_id):
        return error_json('Not Found', 'Session expired or not found', 404)
    return jsonify({'session_id': session_id, 'message': 'Session closed'})


@tables_bp.route('/session/<session_id>/grid', methods=['GET'])
def get_grid(session_id):
    session, err = _session_or_404(session_id)
    if err:
        return err
    doc = session.document
    return jsonify({
        'columns': grid_columns(doc),
        'rows': frame_to_rows(build_grid_frame(doc)),
    })


@tables_bp.route('/session/<session_id>/edit', methods=['POST'])
def edit(session_id):
    """
    Apply one edit operation to the session's table.

    Body: { op: 'update_cell' | 'add_column' | ..., args: {...} }
    """
    session, err = _session_or_404(session_id)
    if err:
        return err
    body = request.get_json(silent=True) or {}
    op = body.get('op')
    if not op:
        return error_json('Validation Error', "'op' is required", 400)
    args = body.get('args') or {}
    if not isinstance(args, dict):
        raise ValidationError("'args' must be an object")

    result = session.apply_named(op, args)
    return jsonify({
        'op': op,
        'result': result.to_dict() if hasattr(result, 'to_dict') else None,
        **session.to_dict(),
    })


@tables_bp.route('/session/<session_id>/changes', methods=['GET'])
def local_changes(session_id):
    session, err = _session_or_404(session_id)
    if err:
        return err
    return jsonify(session.local_changes().to_dict())


@tables_bp.route('/session/<session_id>/download', methods=['GET'])
def download(session_id):
    """Serialize the session's table; downloading counts as saving."""
    session, err = _session_or_404(session_id)
    if err:
        return err
    data = serialize_table(session.document)
    session.mark_saved()
    filename = f'{session.document.rule_table.name or "rules"}.xlsx'
    return _xlsx_response(data, filename)


# ── Pull review / resolution ─────────────────────────────────────────────────

@tables_bp.route('/session/<session_id>/pull', methods=['POST'])
def pull_upload(session_id):
    """Review an uploaded version of the table against the session's table."""
    session, err = _session_or_404(session_id)
    if err:
        return err
    data, filename, err = _read_upload()
    if err:
        return err

    pulled = parse_table_bytes(data)
    pending = session.review_pull(pulled, source={'kind': 'upload', 'filename': filename})
    session_store.add_pending_pull(session_id, pending)
    return jsonify({**pending.to_dict(), 'hasLocalChanges': session.has_unsaved_changes})


@tables_bp.route('/session/<session_id>/resolve', methods=['POST'])
def resolve(session_id):
    """
    Settle a reviewed pull. Body: { pullId, action: 'accept' | 'keep' }
    'accept' replaces the session's table with the pulled one; 'keep' discards it.
    """
    session, err = _session_or_404(session_id)
    if err:
        return err
    body = request.get_json(silent=True) or {}
    pull_id = body.get('pullId')
    if not pull_id or 'action' not in body:
        return error_json('Validation Error', "'pullId' and 'action' are required", 400)

    pending = session_store.get_pending_pull(session_id, pull_id)
    if pending is None:
        return error_json('Not Found', f"Pull '{pull_id}' not found", 404)

    resolution = Resolution.parse(body['action'])
    session.resolve(pending, resolution)
    session_store.clear_pending_pulls(session_id)
    return jsonify({'action': resolution.value, **session.to_dict()})


@tables_bp.route('/session/<session_id>/pull/<pull_id>/report', methods=['GET'])
def pull_report(session_id, pull_id):
    session, err = _session_or_404(session_id)
    if err:
        return err
    pending = session_store.get_pending_pull(session_id, pull_id)
    if pending is None:
        return error_json('Not Found', f"Pull '{pull_id}' not found", 404)

    try:
        data = build_diff_report(pending.diff, session.document.rule_table.name)
    except Exception as e:
        logger.error(f"Report generation failed: {e}")
        return error_json('Internal Server Error', f'Report generation failed: {str(e)}', 500)
    return _xlsx_response(data, f'pull_review_{datetime.now().strftime("%Y%m%d")}.xlsx')

"""
JSON error bodies shared by the blueprints.
"""
import logging
from datetime import datetime, timezone

from flask import jsonify

from .errors import DecisionTableError

logger = logging.getLogger(__name__)


def timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def error_json(error: str, message: str, status: int, **extra):
    body = {'error': error, 'message': message, 'timestamp': timestamp()}
    body.update(extra)
    return jsonify(body), status


def register_error_handlers(bp):
    @bp.errorhandler(DecisionTableError)
    def _handle_table_error(e: DecisionTableError):
        logger.error(f"{type(e).__name__}: {e.message}")
        body = e.to_dict()
        body['timestamp'] = timestamp()
        return jsonify(body), e.status_code

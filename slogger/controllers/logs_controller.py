from flask import Blueprint, current_app, jsonify, request

from ..errors import StorageError
from ..schemas.query_schema import LogFilter
from ..services.auth_service import require_api_key

logs_bp = Blueprint("logs", __name__, url_prefix="/api/logs")


@logs_bp.get("")
@require_api_key
def query_logs():
    """
    Query params (all optional, combined with AND):
    - sources: comma separated, exact match
    - search: free text, any token
    - path: a.b.c or a.b.c=value
    - from / to: ISO datetime, inclusive; malformed -> ignored
    - limit (1..QUERY_MAX_LIMIT, default 1000), offset (>= 0)
    """
    criteria = LogFilter.from_args(request.args)
    svc = current_app.extensions["slogger"].query

    try:
        result = svc.query_logs(criteria)
    except StorageError:
        current_app.logger.exception("QUERY /api/logs failed")
        raise

    return jsonify(result)

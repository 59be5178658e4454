from flask import Blueprint, current_app, jsonify, request

from ..errors import StorageError
from ..services.auth_service import require_api_key

ingest_bp = Blueprint("ingest", __name__, url_prefix="/api/logs")


@ingest_bp.post("/<source>")
@require_api_key
def ingest_logs(source: str):
    """
    Body: JSON array. Objects are stored as props, anything else as {"value": ...}.
    -> {"inserted": n}
    """
    payload = request.get_json(force=True, silent=True)
    svc = current_app.extensions["slogger"].ingest

    try:
        result = svc.ingest(source, payload)
    except StorageError:
        current_app.logger.exception("INGEST failed source=%s", source)
        raise

    return jsonify(result)

from flask import Blueprint, current_app, jsonify

from ..services.auth_service import require_api_key

sources_bp = Blueprint("sources", __name__, url_prefix="/api/sources")


@sources_bp.get("")
@require_api_key
def list_sources():
    sources = current_app.extensions["slogger"].query.query_sources()
    return jsonify({"sources": sources})

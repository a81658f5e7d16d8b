"""
Dashboard cache management endpoint.

GET:    cache statistics (any authenticated user)
DELETE: clear the cache, or only keys containing ?prefix= (admin only)
"""

from flask import jsonify, request

from api.contracts.pydantic_models import CacheClearParams
from api.serializers import success_envelope
from routes.dashboard import dashboard_bp, get_dashboard_cache
from routes.dashboard._route_utils import route_logger
from utils.auth import require_admin, require_auth
from utils.normalize import ValidationError, validation_error_response

logger = route_logger("cache")


@dashboard_bp.route("/cache", methods=["GET"])
@require_auth
def cache_stats():
    return jsonify(success_envelope(get_dashboard_cache().stats()))


@dashboard_bp.route("/cache", methods=["DELETE"])
@require_admin
def clear_cache():
    try:
        params = CacheClearParams.parse(request.args)
    except ValidationError as e:
        return validation_error_response(e)

    removed = get_dashboard_cache().clear(params.prefix)
    logger.info("cache_cleared prefix=%s removed=%d", params.prefix, removed)
    return jsonify(success_envelope({"status": "cache cleared", "removed": removed}))

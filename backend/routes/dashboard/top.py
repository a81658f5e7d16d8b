"""
Top Entities Endpoint

GET /api/dashboard/top?platform=&start=&end=

    200 {ok, topProducts[<=5], topProvinces[<=5], platforms[3 slots | empty]}
    400 invalid params
    401 missing/invalid token (before any aggregation work)
    500 {error, details} when top products or top provinces failed
"""

import time
from flask import current_app, g, jsonify, request

from api.contracts.pydantic_models import TopParams
from api.serializers import aggregation_error_body
from routes.dashboard import dashboard_bp, get_top_entities_service
from routes.dashboard._route_utils import cache_control_header, log_error, log_success, route_logger
from schemas.api_contract import serialize_top_response
from services.errors import AggregationError
from utils.auth import require_auth
from utils.normalize import ValidationError, validation_error_response

logger = route_logger("top")


@dashboard_bp.route("/top", methods=["GET"])
@require_auth
def get_top():
    """
    Top products, provinces and per-platform best sellers for a filter.

    Served from the 60s TTL cache when the same (platform, start, end)
    combination was computed recently. The platform cards are optional:
    if their query fails the response is still 200 with platforms=[].
    """
    start_time = time.perf_counter()

    try:
        params = TopParams.parse(request.args)
    except ValidationError as e:
        return validation_error_response(e)

    service = get_top_entities_service()
    platform_filter = params.platform_filter
    g.cache_status = 'hit' if service.is_cached(platform_filter, params.start, params.end) else 'miss'

    try:
        result = service.fetch(platform_filter, params.start, params.end)
    except AggregationError as e:
        log_error(logger, "top", start_time, e, {
            "platform": params.platform, "start": params.start, "end": params.end,
            "query": e.query, "details": e.details,
        })
        return jsonify(aggregation_error_body(e.message, e.details)), 500

    response = jsonify(serialize_top_response(result))
    max_age = current_app.config.get('HTTP_CACHE_MAX_AGE', 60)
    response.headers['Cache-Control'] = cache_control_header(current_app.config)
    response.headers['CDN-Cache-Control'] = f"max-age={max_age}"
    response.headers['Vary'] = 'Authorization'
    response.headers['X-Cache'] = g.cache_status.upper()

    log_success(logger, "top", start_time, {
        "platform": params.platform,
        "cache": g.cache_status,
        "degraded": result.degraded,
    })
    return response

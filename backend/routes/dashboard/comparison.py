"""
Month Comparison Endpoint

GET /api/dashboard/month-comparison?platform=&start=&end=&basis=

Buckets each platform's daily records (order or payment date basis) into
calendar months and compares every month with the one before it. The first
month of each platform is the baseline: its change fields are null.
"""

import time
from flask import jsonify, request

from api.contracts.pydantic_models import MonthComparisonParams
from api.serializers import success_envelope
from routes.dashboard import dashboard_bp
from routes.dashboard._route_utils import log_success, route_logger
from schemas.api_contract import serialize_month_comparisons
from services.month_comparison import calculate_month_comparison
from services.platform_data import filter_rollups, load_platform_rollups
from utils.auth import require_auth
from utils.normalize import ValidationError, validation_error_response

logger = route_logger("comparison")


@dashboard_bp.route("/month-comparison", methods=["GET"])
@require_auth
def month_comparison():
    start_time = time.perf_counter()

    try:
        params = MonthComparisonParams.parse(request.args)
    except ValidationError as e:
        return validation_error_response(e)

    rollups = filter_rollups(
        load_platform_rollups(params.basis),
        params.platform_filter,
        params.start,
        params.end,
    )
    comparisons = calculate_month_comparison(rollups)

    log_success(logger, "month-comparison", start_time, {
        "platform": params.platform, "platforms": len(comparisons),
    })
    return jsonify(success_envelope(
        serialize_month_comparisons(comparisons),
        meta={
            "platform": params.platform,
            "start": params.start.isoformat() if params.start else None,
            "end": params.end.isoformat() if params.end else None,
            "basis": params.basis,
        },
    ))

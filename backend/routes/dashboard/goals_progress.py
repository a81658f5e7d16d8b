"""
Goal Progress Endpoint

GET /api/dashboard/goals?year=&start=&platform=&basis=

Actual vs target for the focus month and the year-to-date window of one goal
year. Targets always come from the 'all' platform goals; actuals follow the
platform filter.
"""

import time
from datetime import date

from flask import jsonify, request

from api.contracts.pydantic_models import GoalProgressParams
from api.serializers import success_envelope
from routes.dashboard import dashboard_bp
from routes.dashboard._route_utils import log_success, route_logger
from schemas.api_contract import serialize_goal_summary
from services.goal_service import load_goal_records
from services.goal_tracker import build_goal_summary
from services.platform_data import load_platform_rollups
from utils.auth import require_auth
from utils.normalize import ValidationError, validation_error_response

logger = route_logger("goals_progress")


def today() -> date:
    return date.today()


@dashboard_bp.route("/goals", methods=["GET"])
@require_auth
def goal_progress():
    start_time = time.perf_counter()

    try:
        params = GoalProgressParams.parse(request.args)
    except ValidationError as e:
        return validation_error_response(e)

    current = today()
    goals = load_goal_records()
    year = params.resolved_year(current, (g.year for g in goals))

    summary = build_goal_summary(
        goals=goals,
        rollups=load_platform_rollups(params.basis),
        platform_filter=params.platform_filter,
        year=year,
        today=current,
        start=params.start,
    )

    log_success(logger, "goals", start_time, {
        "year": year, "display_type": summary.display_type, "has_any_target": summary.has_any_target,
    })
    return jsonify(success_envelope(serialize_goal_summary(summary), meta={
        "platform": params.platform,
        "basis": params.basis,
    }))

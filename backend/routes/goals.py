"""
Goals Routes - Monthly revenue/profit targets

GET  /api/goals?year=&month=&platform=&type=   any authenticated user
POST /api/goals                                admin only, upsert on
                                               (platform, year, month, type)
"""

import time
from flask import Blueprint, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from api.contracts.pydantic_models import GoalQueryParams, GoalUpsertBody
from api.serializers import success_envelope
from constants import MSG_GOALS_FETCH_FAILED, MSG_GOALS_SAVE_FAILED
from routes.dashboard._route_utils import log_error, log_success, route_logger
from schemas.api_contract import serialize_goal
from services.goal_service import list_goals, save_goal
from utils.auth import require_admin, require_auth
from utils.normalize import ValidationError, validation_error_response

goals_bp = Blueprint('goals', __name__)

logger = route_logger("goals")


@goals_bp.route("", methods=["GET"])
@require_auth
def get_goals():
    start_time = time.perf_counter()

    try:
        params = GoalQueryParams.parse(request.args)
    except ValidationError as e:
        return validation_error_response(e)

    try:
        goals = list_goals(
            year=params.year,
            month=params.month,
            platform=params.platform,
            goal_type=params.type,
        )
    except SQLAlchemyError as e:
        log_error(logger, "goals.get", start_time, e)
        return jsonify({"error": MSG_GOALS_FETCH_FAILED, "details": str(e)}), 500

    log_success(logger, "goals.get", start_time, {"count": len(goals)})
    return jsonify(success_envelope([serialize_goal(g) for g in goals]))


@goals_bp.route("", methods=["POST"])
@require_admin
def upsert_goal():
    start_time = time.perf_counter()

    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return validation_error_response(ValidationError("Request body must be a JSON object"))

    try:
        payload = GoalUpsertBody.parse(body)
    except ValidationError as e:
        return validation_error_response(e)

    try:
        goal = save_goal(
            platform=payload.platform,
            year=payload.year,
            month=payload.month,
            goal_type=payload.type,
            target=payload.target,
        )
    except SQLAlchemyError as e:
        log_error(logger, "goals.post", start_time, e)
        return jsonify({"error": MSG_GOALS_SAVE_FAILED, "details": str(e)}), 500

    log_success(logger, "goals.post", start_time, {
        "platform": payload.platform, "year": payload.year, "month": payload.month, "type": payload.type,
    })
    return jsonify(success_envelope(serialize_goal(goal)))

"""
Error envelope middleware - Standardize all error responses.

Generic errors use:
{
    "error": {
        "code": "NOT_FOUND",
        "message": "The requested resource was not found",
        "requestId": "uuid"
    }
}

Dashboard aggregation failures keep the flat shape the dashboard client
renders directly: {"error": "<localized message>", "details": "..."}.
"""

import logging
from flask import Flask, jsonify, g
from werkzeug.exceptions import HTTPException

from api.serializers import aggregation_error_body
from services.errors import AggregationError
from utils.normalize import ValidationError, validation_error_response


logger = logging.getLogger('api.middleware.error')


def setup_error_handlers(app: Flask) -> None:
    """
    Set up standardized error handlers on Flask app.

    Handles:
    - ValidationError escaping a route (400)
    - AggregationError escaping a route (500, flat shape)
    - HTTP exceptions (404, 405, ...)
    - Unhandled Python exceptions (500)
    """

    @app.errorhandler(ValidationError)
    def handle_validation_error(error):
        body, status = validation_error_response(error)
        return jsonify(body), status

    @app.errorhandler(AggregationError)
    def handle_aggregation_error(error):
        logger.error(
            "aggregation_failed query=%s details=%s request_id=%s",
            error.query, error.details, getattr(g, 'request_id', None),
        )
        return jsonify(aggregation_error_body(error.message, error.details)), 500

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        # "Not Found" -> "NOT_FOUND"
        code = error.name.upper().replace(' ', '_')
        return make_error_response(code, error.description, status_code=error.code)

    @app.errorhandler(Exception)
    def handle_generic_error(error):
        request_id = getattr(g, 'request_id', None)
        logger.exception(
            "unhandled_error type=%s request_id=%s err=%s",
            type(error).__name__, request_id, error,
        )
        return make_error_response("INTERNAL_ERROR", "An unexpected error occurred")


# Error codes reference
ERROR_CODES = {
    # Client errors (4xx)
    "BAD_REQUEST": 400,
    "UNAUTHORIZED": 401,
    "FORBIDDEN": 403,
    "NOT_FOUND": 404,
    "METHOD_NOT_ALLOWED": 405,
    "CONFLICT": 409,
    "UNPROCESSABLE_ENTITY": 422,
    "TOO_MANY_REQUESTS": 429,

    "INVALID_PARAMS": 400,
    "AUTH_REQUIRED": 401,
    "ADMIN_REQUIRED": 403,

    # Server errors (5xx)
    "AGGREGATION_FAILED": 500,
    "INTERNAL_ERROR": 500,
    "SERVICE_UNAVAILABLE": 503,
}


def make_error_response(
    code: str,
    message: str,
    status_code: int = None,
    field: str = None,
    details: dict = None,
):
    """
    Create a standardized error response.

    Args:
        code: Error code (e.g., "INVALID_PARAMS")
        message: Human-readable error message
        status_code: HTTP status code (defaults based on error code)
        field: Optional field name that caused the error
        details: Optional additional details dict

    Returns:
        Tuple of (response, status_code)
    """
    request_id = getattr(g, 'request_id', None)

    if status_code is None:
        status_code = ERROR_CODES.get(code, 500)

    error = {
        "code": code,
        "message": message,
        "requestId": request_id,
    }
    if field:
        error["field"] = field
    if details:
        error["details"] = details

    response = jsonify({"error": error})
    if request_id:
        response.headers['X-Request-ID'] = request_id

    return response, status_code

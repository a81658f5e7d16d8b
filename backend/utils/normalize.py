"""
Input Normalization Utilities
=============================

Shared error type for rejected request input, its 400 response shape, and
date coercion for stored per-day series.

Request params are parsed by the pydantic models in
api.contracts.pydantic_models, which raise ValidationError from here.

Usage:
    from utils.normalize import ValidationError, validation_error_response

    @bp.route("/data")
    def get_data():
        try:
            params = TopParams.parse(request.args)
        except ValidationError as e:
            return validation_error_response(e)
"""

from datetime import date, datetime
from typing import Optional


class ValidationError(ValueError):
    """Raised when input cannot be normalized to expected type."""

    def __init__(self, message: str, field: str = None, received_value=None):
        super().__init__(message)
        self.field = field
        self.received_value = received_value


def validation_error_response(error: ValidationError) -> tuple:
    """
    Convert ValidationError to a structured 400 response tuple.

    Returns:
        Tuple of (dict, 400) suitable for Flask response
    """
    response = {
        "error": str(error),
        "type": "validation_error"
    }
    if error.field:
        response["field"] = error.field
    if error.received_value is not None:
        response["received_value"] = str(error.received_value)
    return response, 400


# ============================================================================
# SERVICE LAYER COERCION (for internal use)
# ============================================================================

def coerce_to_date(value) -> Optional[date]:
    """
    Coerce value to date object. For use in SERVICE LAYER only.

    Stored per-day arrays carry their dates as 'YYYY-MM-DD' strings (sometimes
    full ISO timestamps); services call this when converting them.

    Raises:
        ValueError: If value cannot be coerced to date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            if len(value) > 10:
                return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
            return datetime.strptime(value, "%Y-%m-%d").date()
        except ValueError:
            raise ValueError(f"Cannot parse date string: {value!r}")
    raise ValueError(f"Cannot coerce {type(value).__name__} to date: {value!r}")

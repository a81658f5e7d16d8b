"""
Pydantic models for API param validation.

Key features:
- Frozen models (immutable after normalization)
- Auto type coercion with clear error messages
- Platform values normalized once at the boundary

Usage:
    from api.contracts.pydantic_models import TopParams

    # Validate params (raises utils.normalize.ValidationError)
    params = TopParams.parse(request.args)

    # Typed platform selection for the service layer
    params.platform_filter
"""

from .base import BaseParamsModel
from .dashboard import CacheClearParams, GoalProgressParams, MonthComparisonParams, TopParams
from .goals import GoalQueryParams, GoalUpsertBody

__all__ = [
    'BaseParamsModel',
    'TopParams',
    'MonthComparisonParams',
    'GoalProgressParams',
    'CacheClearParams',
    'GoalQueryParams',
    'GoalUpsertBody',
]

# API Schema Contract Package
from .api_contract import (
    API_CONTRACT_HEADER,
    CURRENT_API_CONTRACT_VERSION,
    Platform,
    PlatformFilter,
    serialize_top_response,
    serialize_month_comparisons,
    serialize_goal,
    serialize_goal_summary,
)

__all__ = [
    'API_CONTRACT_HEADER',
    'CURRENT_API_CONTRACT_VERSION',
    'Platform',
    'PlatformFilter',
    'serialize_top_response',
    'serialize_month_comparisons',
    'serialize_goal',
    'serialize_goal_summary',
]

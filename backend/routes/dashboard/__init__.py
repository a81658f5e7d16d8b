"""
Dashboard API Routes - Split into domain-specific modules

- top.py: Top products / provinces / platform cards (cached fan-out)
- comparison.py: Month-over-month settlement comparison
- goals_progress.py: Goal vs actual for a focus month and YTD
- cache.py: Cache stats and invalidation

All modules share the same blueprint (dashboard_bp) registered at /api/dashboard.
"""

from flask import Blueprint, current_app
from schemas.api_contract import API_CONTRACT_HEADER, CURRENT_API_CONTRACT_VERSION

# Create the shared blueprint
dashboard_bp = Blueprint('dashboard', __name__)


@dashboard_bp.after_request
def add_contract_version_header(response):
    """Add X-API-Contract-Version header to all dashboard responses."""
    response.headers[API_CONTRACT_HEADER] = CURRENT_API_CONTRACT_VERSION
    return response


def get_top_entities_service():
    return current_app.extensions['top_entities_service']


def get_dashboard_cache():
    return current_app.extensions['dashboard_cache']


# Import all route modules to register their routes with the blueprint
from routes.dashboard import top  # noqa: E402,F401
from routes.dashboard import comparison  # noqa: E402,F401
from routes.dashboard import goals_progress  # noqa: E402,F401
from routes.dashboard import cache  # noqa: E402,F401

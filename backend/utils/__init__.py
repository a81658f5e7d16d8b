"""
Utility modules for the backend.
"""
from .auth import (
    generate_token,
    verify_token,
    get_claims_from_request,
    require_auth,
    require_admin,
    ROLE_ADMIN,
    ROLE_VIEWER,
)
from .rate_limiter import (
    init_limiter,
    get_rate_limit_key,
    RATE_LIMITS,
)

__all__ = [
    'generate_token',
    'verify_token',
    'get_claims_from_request',
    'require_auth',
    'require_admin',
    'ROLE_ADMIN',
    'ROLE_VIEWER',
    'init_limiter',
    'get_rate_limit_key',
    'RATE_LIMITS',
]

"""
Rate Limiter Configuration

Caps request rates so a misbehaving dashboard tab cannot hammer the rollup
functions. Uses Redis when REDIS_URL is set, memory storage otherwise.

Key decisions:
- Token subject when authenticated (prevents punishing shared IPs)
- IP-based key for anonymous requests
- Tiered limits by endpoint cost
"""

import os
import logging
from flask import request, g

from utils.auth import get_claims_from_request

logger = logging.getLogger(__name__)


def _storage_uri():
    redis_url = os.environ.get("REDIS_URL")
    return redis_url if redis_url else "memory://"


def get_rate_limit_key():
    """Rate limit key - token subject if authenticated, else remote_addr."""
    # Limits are checked before the auth decorators run, so read the token here
    claims = getattr(g, 'current_user', None) or get_claims_from_request()
    if claims and claims.get('sub'):
        return f"user:{claims['sub']}"
    return f"ip:{request.remote_addr}"


# Per-endpoint rate limits (tune by computational cost)
RATE_LIMITS = {
    # Served from the TTL cache most of the time
    "cached": "200 per minute",

    # In-memory derivations over platform_metrics
    "summary": "60 per minute",

    # Writes and cache management
    "write": "20 per minute",
}

# Default limits for unannotated endpoints
DEFAULT_LIMITS = ["1000 per day", "300 per hour"]


def init_limiter(app):
    """
    Initialize Flask-Limiter with the app.

    Honors RATELIMIT_ENABLED (disabled under TestConfig). Returns the limiter
    instance, which create_app() applies to the dashboard and goal views.
    """
    from flask_limiter import Limiter

    storage_uri = _storage_uri()
    limiter = Limiter(
        key_func=get_rate_limit_key,
        app=app,
        default_limits=DEFAULT_LIMITS,
        storage_uri=storage_uri,
        key_prefix="rate_limit",
        headers_enabled=True,
        enabled=app.config.get("RATELIMIT_ENABLED", True),
    )

    @app.errorhandler(429)
    def ratelimit_handler(e):
        return {
            "error": "Rate limit exceeded",
            "message": str(e.description),
            "retry_after": getattr(e, 'retry_after', None) or 60,
        }, 429

    app.extensions["rate_limiter"] = limiter

    if storage_uri == "memory://":
        logger.warning("Rate limiter using in-memory storage (dev only)")
    logger.info("Rate limiter initialized enabled=%s", limiter.enabled)
    return limiter

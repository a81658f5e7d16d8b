"""
Auth Utility

Bearer-token checks for dashboard and goal endpoints. Tokens are HS256 JWTs
issued by the login service with claims:

    sub   - user identifier
    role  - 'admin' or 'viewer'
    exp   - expiry

Decorators short-circuit with 401/403 before the wrapped view does any work.
"""
from datetime import datetime, timedelta, timezone
from functools import wraps

import jwt
from flask import current_app, g, jsonify, request

ROLE_ADMIN = 'admin'
ROLE_VIEWER = 'viewer'


def generate_token(subject, role=ROLE_VIEWER, expires_in_hours=None):
    """Generate a signed JWT for subject with the given role."""
    config = current_app.config
    hours = expires_in_hours if expires_in_hours is not None else config['JWT_EXPIRATION_HOURS']
    now = datetime.now(timezone.utc)
    payload = {
        'sub': str(subject),
        'role': role,
        'iat': now,
        'exp': now + timedelta(hours=hours),
    }
    return jwt.encode(payload, config['JWT_SECRET'], algorithm=config['JWT_ALGORITHM'])


def verify_token(token):
    """Verify JWT token and return its claims, or None if invalid or expired."""
    config = current_app.config
    try:
        return jwt.decode(token, config['JWT_SECRET'], algorithms=[config['JWT_ALGORITHM']])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def get_claims_from_request():
    """
    Extract and verify claims from the Authorization header.

    Returns:
        Claims dict if a valid bearer token was sent, None otherwise
    """
    auth_header = request.headers.get('Authorization')
    if not auth_header or not auth_header.startswith('Bearer '):
        return None

    token = auth_header.split(' ', 1)[1].strip()
    if not token:
        return None
    return verify_token(token)


def is_admin(claims):
    return bool(claims) and claims.get('role') == ROLE_ADMIN


def require_auth(f):
    """
    Decorator to require a valid token (any role).

    Returns 401 if the caller is not authenticated.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        claims = get_claims_from_request()
        if not claims:
            return jsonify({
                "error": "Unauthorized",
                "code": "AUTH_REQUIRED"
            }), 401
        g.current_user = claims
        return f(*args, **kwargs)
    return decorated_function


def require_admin(f):
    """
    Decorator to require an admin token.

    Returns 401 without a valid token, 403 for non-admin roles.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        claims = get_claims_from_request()
        if not claims:
            return jsonify({
                "error": "Unauthorized",
                "code": "AUTH_REQUIRED"
            }), 401
        if not is_admin(claims):
            return jsonify({
                "error": "Forbidden - Admin access required",
                "code": "ADMIN_REQUIRED"
            }), 403
        g.current_user = claims
        return f(*args, **kwargs)
    return decorated_function

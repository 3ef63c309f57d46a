# devtoolkit/utils/decorators.py
"""Authentication and authorization decorators"""
from functools import wraps

from flask import current_app, g, jsonify, request
from loguru import logger

from devtoolkit.services.token_codec import TokenCodec


def bearer_token():
    """Token from the Authorization header, falling back to the login cookie"""
    header = request.headers.get('Authorization', '')
    scheme, _, credentials = header.partition(' ')
    if scheme.lower() == 'bearer' and credentials.strip():
        return credentials.strip()
    return request.cookies.get(current_app.config['AUTH_COOKIE_NAME'])


def token_required(f):
    """
    Decorator for routes that need a signed-in user
    Verifies the bearer token on every request and exposes its claims as g.current_claims
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if not token:
            return jsonify({'success': False, 'message': 'Authentication required'}), 401

        claims = TokenCodec.from_app().verify(token)
        if not claims:
            return jsonify({'success': False, 'message': 'Invalid or expired token'}), 401

        g.current_claims = claims
        g.current_token = token
        return f(*args, **kwargs)
    return decorated_function


def admin_required(f):
    """
    Decorator for admin-only routes
    Must be applied beneath token_required
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        claims = g.get('current_claims')
        if not claims or not claims.is_admin:
            logger.warning(f"Admin route {request.path} refused for "
                           f"user {claims.user_id if claims else 'anonymous'}")
            return jsonify({'success': False, 'message': 'Admin access required'}), 403
        return f(*args, **kwargs)
    return decorated_function

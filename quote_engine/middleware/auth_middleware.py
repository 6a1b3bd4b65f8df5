"""Authentication middleware for protecting routes."""
from functools import wraps
from flask import request

from quote_engine.config import settings
from quote_engine.utils.errors import error_response


def get_bearer_token():
    """Return the token from an 'Authorization: Bearer <token>' header, or None."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_auth(f):
    """
    Decorator to require a bearer token for a route.

    When API_TOKENS is configured the token must be one of them; otherwise
    any non-empty token is accepted.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = get_bearer_token()

        if not token:
            return error_response("MISSING_TOKEN", "Authentication required", 401)

        if settings.API_TOKENS and token not in settings.API_TOKENS:
            return error_response("INVALID_TOKEN", "Invalid access token", 401)

        # Add token to request context for use in route handlers
        request.access_token = token

        return f(*args, **kwargs)

    return decorated_function

# Overview: Request and role decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import user_service


def _is_authenticated() -> bool:
    return hasattr(g, 'current_user')


def require_auth(f):
    """
    Require HTTP Basic credentials of an active user.

    Sets g.current_user to the authenticated User. Returns 401 if the header
    is missing, the credentials are wrong or the account is voided.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth = request.authorization

        if auth is None or auth.type != "basic" or not auth.username:
            return jsonify({"error": "Authentication required"}), 401, {
                "WWW-Authenticate": 'Basic realm="pdv"'
            }

        user = user_service.authenticate(auth.username, auth.password or "")
        if user is None:
            return jsonify({"error": "Invalid credentials"}), 401, {
                "WWW-Authenticate": 'Basic realm="pdv"'
            }

        g.current_user = user
        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: str):
    """Require the authenticated user to hold one of `roles`."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Ensure @require_auth was called first
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            if g.current_user.role not in roles:
                return jsonify({
                    "error": "Permission denied",
                    "required_roles": list(roles),
                }), 403

            return f(*args, **kwargs)

        return decorated_function

    return decorator

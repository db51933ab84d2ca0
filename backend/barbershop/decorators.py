# Overview: Request and role decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .models import Role
from .services import session_service


def require_auth(f):
    """
    Require authentication and establish tenant context.

    Sets on Flask g:
    - g.current_user: the authenticated User
    - g.actor: ActorContext passed explicitly into every service call
    - g.session_context: the full SessionContext
    - g.token: the bearer token (for sign-out)

    Returns 401 if the header is missing or the token is unknown, revoked,
    expired, or belongs to an inactive shop.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        # Extract token from Authorization header
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"error": "Authentication required"}), 401

        token = auth_header.split(" ", 1)[1]

        context = session_service.validate_session(token)

        if not context:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_user = context.user
        g.actor = context.actor
        g.session_context = context
        g.token = token

        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: Role):
    """
    Require the authenticated user to hold one of roles.

    Must be stacked under @require_auth. Returns 403 otherwise.
    """
    allowed = set(roles)

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not hasattr(g, "actor"):
                return jsonify({"error": "Authentication required"}), 401
            if g.actor.role not in allowed:
                return jsonify({
                    "error": "permission_denied",
                    "message": "You are not allowed to perform this action",
                }), 403
            return f(*args, **kwargs)

        return decorated_function

    return decorator

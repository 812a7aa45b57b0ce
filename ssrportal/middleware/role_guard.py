from functools import wraps
from flask import current_app
from flask_jwt_extended import verify_jwt_in_request, get_jwt, get_jwt_identity

from ssrportal.errors import Forbidden, Unauthorized


def current_user_id():
    identity = get_jwt_identity()
    try:
        return int(identity)
    except (TypeError, ValueError):
        raise Unauthorized()


def current_role():
    return get_jwt().get("role")


def role_required(*roles):
    """
    Decorator to protect routes by role claim.

    Usage:
        @bp.get('/teams')
        @role_required(UserRole.MENTOR)
        def list_teams():
            ...

    Missing or invalid tokens are rejected by the JWT loaders (401);
    a valid token with another role gets a 403.
    """
    allowed = {getattr(r, "value", r) for r in roles}

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            verify_jwt_in_request()
            role = current_role()
            if allowed and role not in allowed:
                current_app.logger.warning(
                    f"User {get_jwt_identity()} with role {role} denied access to {f.__name__}"
                )
                raise Forbidden(f"Only {' or '.join(sorted(allowed)).lower()} users can access this resource")
            return f(*args, **kwargs)

        return decorated_function

    return decorator

from functools import wraps
from flask import abort
from flask_jwt_extended import verify_jwt_in_request
from studio.services.policy import load_current_user, roles_for


def require_roles(*roles: str, action: str = None):
    """Verify the bearer token and check the caller's stored role.

    Pass roles directly or an ``action`` key from ROLE_ACTIONS. With neither,
    any signed-in profile is accepted.
    """
    allowed = set(roles) | set(roles_for(action) if action else ())

    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            user = load_current_user()
            if user is None:
                abort(401, description='Invalid session')
            if allowed and user.role not in allowed:
                abort(403, description='Insufficient role')
            return fn(*args, **kwargs)
        return wrapper
    return outer

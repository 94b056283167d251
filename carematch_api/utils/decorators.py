import logging
from functools import wraps

from flask_jwt_extended import get_jwt, get_jwt_identity, jwt_required

from carematch.shared.errors import AuthorizationError

from .errors import error_response

logger = logging.getLogger(__name__)


def current_identity() -> tuple[str, str | None]:
    """Return ``(user_id, role)`` from the verified JWT of the current request."""
    return get_jwt_identity(), get_jwt().get("role")


def role_required(*roles: str):
    """Decorator to require a valid JWT whose role claim is one of ``roles``."""

    def decorator(f):
        @wraps(f)
        @jwt_required()
        def decorated_function(*args, **kwargs):
            user_id, role = current_identity()
            if role not in roles:
                logger.info(f"User {user_id} with role {role!r} denied {f.__name__}")
                return error_response(
                    AuthorizationError(f"This action requires role: {' or '.join(roles)}")
                )
            return f(*args, **kwargs)

        return decorated_function

    return decorator

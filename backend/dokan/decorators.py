# Overview: Request decorators for API routes; login guard and store-error translation.

from functools import wraps
from flask import jsonify, g, current_app

from .services import session_service
from .validation import ConflictError, NotFoundError, StoreUnavailable, ValidationError


def require_login(f):
    """
    Require an active local session.

    Sets g.current_user to the logged-in UserCredential.
    Returns 401 if nobody is logged in on this till.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = session_service.current_user()
        if user is None:
            return jsonify({"error": "Login required"}), 401
        g.current_user = user
        return f(*args, **kwargs)

    return decorated_function


def json_errors(action: str):
    """
    Map data-layer errors to JSON responses.

    ValidationError -> 400, NotFoundError -> 404, ConflictError -> 409,
    StoreUnavailable -> 503. Anything else is logged and returned as 500.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except ValidationError as e:
                return jsonify({"error": str(e)}), 400
            except NotFoundError as e:
                return jsonify({"error": str(e)}), 404
            except ConflictError as e:
                return jsonify({"error": str(e)}), 409
            except StoreUnavailable:
                current_app.logger.exception("Local store unavailable while trying to %s", action)
                return jsonify({"error": "Local store unavailable"}), 503
            except Exception:
                current_app.logger.exception("Failed to %s", action)
                return jsonify({"error": "Internal server error"}), 500

        return decorated_function

    return decorator

import logging
from functools import wraps

from flask import request, jsonify, g

from classes.access_policy import is_allowed
from classes.errors import LMSError
from models import db
from utils.tokens import decode_jwt

logger = logging.getLogger(__name__)


def get_request_token():
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[len("Bearer "):].strip()
    return request.cookies.get("access_token")


def login_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = get_request_token()
        if not token:
            return jsonify({"error": "Unauthorized", "message": "No token provided"}), 401

        decoded = decode_jwt(token)
        if not decoded or not decoded.get("user_id"):
            return jsonify({"error": "Invalid token"}), 401

        g.user = decoded
        return f(*args, **kwargs)

    return decorated_function


def roles_required(action):
    """Rejects callers whose role may never perform `action`. Ownership is checked later, per resource."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            role = g.user.get("role")
            if not is_allowed(role, action):
                return jsonify({
                    "error": "Forbidden",
                    "message": "You do not have permission to perform this action",
                }), 403
            return f(*args, **kwargs)

        return decorated_function

    return decorator


def api_errors(operation):
    """Turns manager errors into JSON responses; anything unexpected becomes a logged 500."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except LMSError as e:
                db.session.rollback()
                return jsonify(e.to_dict()), e.status_code
            except Exception:
                db.session.rollback()
                logger.exception("%s error", operation)
                return jsonify({"error": f"Failed to {operation}"}), 500

        return decorated_function

    return decorator


def get_json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def current_user_id():
    return g.user.get("user_id")


def current_role():
    return g.user.get("role")

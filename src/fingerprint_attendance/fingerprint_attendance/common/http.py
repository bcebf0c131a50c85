from __future__ import annotations

import logging
from functools import wraps
from typing import Optional

from flask import g, jsonify, request

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConcurrentUpdateError,
    DomainError,
    UserNotFound,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (UserNotFound, 404),
    (ConcurrentUpdateError, 409),
)


def error_response(e: Exception, *, context: str = "request"):
    """JSON error body + HTTP status for an exception raised inside a view."""

    for exc_type, status in _STATUS:
        if isinstance(e, exc_type):
            return jsonify({"success": False, "message": str(e)}), status
    if isinstance(e, DomainError):
        return jsonify({"success": False, "message": str(e)}), 400

    logger.exception("Unexpected error while handling %s", context)
    return jsonify({"success": False, "message": "Internal server error"}), 500


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def auth_decorators(auth_service):
    """Build token_required / admin_required bound to an AuthService.

    The authenticated User is stored on flask.g.current_user.
    """

    def token_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            token = bearer_token()
            if not token:
                return jsonify({"success": False, "message": "Authorization token required"}), 401
            try:
                g.current_user = auth_service.user_from_token(token)
            except AuthenticationError as e:
                return jsonify({"success": False, "message": str(e)}), 401
            return view(*args, **kwargs)

        return wrapper

    def admin_required(view):
        @wraps(view)
        @token_required
        def wrapper(*args, **kwargs):
            if not g.current_user.is_admin:
                return jsonify({"success": False, "message": "Admin access required"}), 403
            return view(*args, **kwargs)

        return wrapper

    return token_required, admin_required

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Dict

from flask import current_app, g, jsonify, request

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    DuplicateTransactionError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Internal server error"


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def error_response(e: DomainError):
    """Map a domain failure to a JSON body and status code."""

    if isinstance(e, DuplicateTransactionError):
        return jsonify({"ok": False, "error": e.message, "fieldErrors": e.field_errors}), 409
    if isinstance(e, ValidationError):
        body: Dict[str, Any] = {"ok": False, "error": e.message}
        if e.field_errors:
            body["fieldErrors"] = e.field_errors
        return jsonify(body), 400
    if isinstance(e, AuthenticationError):
        return jsonify({"ok": False, "error": str(e)}), 401
    if isinstance(e, AuthorizationError):
        return jsonify({"ok": False, "error": str(e)}), 403
    if isinstance(e, NotFoundError):
        return jsonify({"ok": False, "error": str(e)}), 404
    return jsonify({"ok": False, "error": str(e)}), 400


def unexpected_response(action: str):
    """Log the active exception server-side; the caller only gets a generic message."""

    logger.exception("Unexpected failure while %s", action)
    return jsonify({"ok": False, "error": GENERIC_ERROR}), 500


def session_token():
    return request.cookies.get(current_app.config["AUTH_COOKIE_NAME"])


def set_session_cookie(response, token: str, *, max_age: int) -> None:
    response.set_cookie(
        current_app.config["AUTH_COOKIE_NAME"],
        token,
        max_age=max_age,
        path="/",
        httponly=True,
        samesite="Lax",
        secure=bool(current_app.config.get("AUTH_COOKIE_SECURE", False)),
    )


def clear_session_cookie(response) -> None:
    response.set_cookie(
        current_app.config["AUTH_COOKIE_NAME"],
        "",
        max_age=0,
        expires=0,
        path="/",
        httponly=True,
        samesite="Lax",
        secure=bool(current_app.config.get("AUTH_COOKIE_SECURE", False)),
    )


def role_required(container, minimum_role: Role = Role.STUDENT):
    """Run the authorization gate before the view; the principal lands in ``g.principal``."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                g.principal = container.gate.require_role(session_token(), minimum_role)
            except (AuthenticationError, AuthorizationError) as e:
                return error_response(e)
            return view(*args, **kwargs)

        return wrapper

    return decorator

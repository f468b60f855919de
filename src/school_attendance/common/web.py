from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Optional

from flask import Flask, jsonify, request, session

from ..core.exceptions import ConcurrentMarkConflict, DomainError, NotFound, StorageError, ValidationError
from .datetime_utils import parse_iso_date, parse_iso_datetime

logger = logging.getLogger(__name__)


def login_required(view):
    """Require an actor id in the session; the session itself is issued by the auth service."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"message": "Authentication required"}), 401
        return view(*args, **kwargs)

    return wrapper


def current_actor_id() -> int:
    return int(session["user_id"])


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def date_arg(name: str) -> Optional[Any]:
    value = (request.args.get(name) or "").strip()
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"Invalid {name}: expected YYYY-MM-DD") from None


def datetime_value(value: Any, name: str) -> Optional[Any]:
    if value is None or str(value).strip() == "":
        return None
    try:
        return parse_iso_datetime(str(value))
    except ValueError:
        raise ValidationError(f"Invalid {name}: expected an ISO-8601 date") from None


def int_value(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {name}: {value!r}") from None


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return jsonify({"message": str(e)}), 400

    @app.errorhandler(NotFound)
    def _not_found(e: NotFound):
        return jsonify({"message": str(e)}), 404

    @app.errorhandler(ConcurrentMarkConflict)
    def _conflict(e: ConcurrentMarkConflict):
        return jsonify({"message": str(e), "retryable": True}), 409

    @app.errorhandler(DomainError)
    def _domain(e: DomainError):
        return jsonify({"message": str(e)}), 400

    @app.errorhandler(StorageError)
    def _storage(e: StorageError):
        logger.exception("Storage failure on %s %s", request.method, request.path)
        message = "Server error"
        if bool(app.config.get("DEBUG", False)):
            message = f"Server error: {e}"
        return jsonify({"message": message}), 500

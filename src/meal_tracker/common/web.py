from __future__ import annotations

import logging
from functools import wraps
from typing import Optional

from flask import jsonify, request, session

from ..core.enums import DenialReason, MealType, Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError

logger = logging.getLogger(__name__)

_DENIAL_STATUS = {
    DenialReason.USER_NOT_FOUND: 404,
    DenialReason.USER_NOT_APPROVED: 403,
    DenialReason.DEVICE_MISMATCH: 403,
    DenialReason.RATE_LIMITED: 429,
}


def status_for(reason: Optional[DenialReason]) -> int:
    if reason is None:
        return 200
    return _DENIAL_STATUS.get(reason, 400)


def error(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return error("Login required", 401)
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return error("Login required", 401)
        if session.get("role") != Role.ADMIN.value:
            return error("Admin permission required", 403)
        return view(*args, **kwargs)

    return wrapper


def json_errors(view):
    """Map domain exceptions to JSON responses; anything else is a logged 500."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            return error(str(e), 400)
        except AuthenticationError as e:
            return error(str(e), 401)
        except AuthorizationError as e:
            return error(str(e), 403)
        except Exception:
            logger.exception("unhandled error on %s %s", request.method, request.path)
            return error("Server error", 500)

    return wrapper


def current_user_id() -> int:
    return int(session["user_id"])


def current_role() -> Role:
    return Role(session.get("role", Role.STAFF.value))


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def parse_meal_type(value) -> MealType:
    try:
        return MealType(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError("mealType must be 'breakfast' or 'lunch'")


def optional_int(value, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")


def client_ip() -> Optional[str]:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("X-Real-IP") or request.remote_addr

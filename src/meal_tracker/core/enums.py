from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    ADMIN = "admin"
    STAFF = "staff"


class MealType(str, Enum):
    """Meal types that carry a monthly credit."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"


class DenialReason(str, Enum):
    """Reason tags for rejected meal, token and scan requests."""

    USER_NOT_FOUND = "USER_NOT_FOUND"
    USER_INACTIVE = "USER_INACTIVE"
    USER_NOT_APPROVED = "USER_NOT_APPROVED"
    OUTSIDE_MEAL_WINDOW = "OUTSIDE_MEAL_WINDOW"
    ALREADY_TAKEN = "ALREADY_TAKEN"
    QUOTA_EXHAUSTED = "QUOTA_EXHAUSTED"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_TAMPERED = "TOKEN_TAMPERED"
    TOKEN_MALFORMED = "TOKEN_MALFORMED"
    RATE_LIMITED = "RATE_LIMITED"
    DEVICE_MISMATCH = "DEVICE_MISMATCH"

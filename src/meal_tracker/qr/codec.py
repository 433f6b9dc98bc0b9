"""Signed, time-boxed QR tokens.

A token is a compact HS256 JWT carrying
    {"v": 1, "uid": 7, "meal": "lunch", "iat": <s>, "exp": <s>, "nonce": "..."}

This is an anti-tamper control for an internal cafeteria system, not
non-repudiation.
"""

from __future__ import annotations

import binascii
import secrets
from datetime import datetime
from typing import Any, Optional

import jwt
from jwt.utils import base64url_decode, base64url_encode

from ..common.datetime_utils import now_local, to_epoch_seconds
from ..core.constants import QR_PAYLOAD_VERSION, QR_TOKEN_TTL_MINUTES
from ..core.enums import DenialReason, MealType
from .model import QRPayload, TokenVerification

JWT_ALGORITHM = "HS256"
_CLAIMS = ("v", "uid", "meal", "iat", "exp", "nonce")


def _is_canonical(token: Any) -> bool:
    """Three segments and a signature segment in the exact form PyJWT writes it.

    base64url leaves spare bits in the last character; without this check two
    different strings would carry the same signature.
    """

    if not isinstance(token, str) or not token.isascii():
        return False
    parts = token.split(".")
    if len(parts) != 3:
        return False
    try:
        return base64url_encode(base64url_decode(parts[2])).decode("ascii") == parts[2]
    except (binascii.Error, ValueError):
        return False


def _to_payload(claims: Any) -> Optional[QRPayload]:
    if not isinstance(claims, dict) or set(claims) != set(_CLAIMS):
        return None
    if type(claims["v"]) is not int or claims["v"] != QR_PAYLOAD_VERSION:
        return None
    if not all(type(claims[k]) is int for k in ("uid", "iat", "exp")):
        return None
    if not isinstance(claims["nonce"], str):
        return None
    try:
        meal_type = MealType(claims["meal"])
    except (TypeError, ValueError):
        return None

    return QRPayload(
        version=claims["v"],
        user_id=claims["uid"],
        meal_type=meal_type,
        issued_at=claims["iat"],
        valid_until=claims["exp"],
        nonce=claims["nonce"],
    )


class QRTokenCodec:
    def __init__(self, secret: str, *, ttl_minutes: int = QR_TOKEN_TTL_MINUTES):
        if not secret:
            raise ValueError("QR signing secret must not be empty")
        self._secret = secret
        self._ttl_seconds = int(ttl_minutes) * 60

    def issue(self, user_id: int, meal_type: MealType, *, now: Optional[datetime] = None) -> str:
        issued_at = to_epoch_seconds(now or now_local())
        claims = {
            "v": QR_PAYLOAD_VERSION,
            "uid": int(user_id),
            "meal": meal_type.value,
            "iat": issued_at,
            "exp": issued_at + self._ttl_seconds,
            "nonce": secrets.token_hex(8),
        }
        return jwt.encode(claims, self._secret, algorithm=JWT_ALGORITHM)

    @staticmethod
    def decode(token: str) -> Optional[QRPayload]:
        """Read the claims without checking the signature. None when not a v1 token."""

        if not _is_canonical(token):
            return None
        try:
            claims = jwt.decode(token, options={"verify_signature": False})
        except jwt.InvalidTokenError:
            return None
        return _to_payload(claims)

    def verify(self, token: str, *, now: Optional[datetime] = None) -> TokenVerification:
        if not _is_canonical(token):
            return TokenVerification(valid=False, reason=DenialReason.TOKEN_MALFORMED)

        # PyJWT checks the signature before any claim, so an edited expiry
        # reports as tampered. Expiry itself is judged on the application clock.
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": list(_CLAIMS), "verify_exp": False, "verify_iat": False},
            )
        except jwt.InvalidSignatureError:
            return TokenVerification(valid=False, reason=DenialReason.TOKEN_TAMPERED)
        except jwt.InvalidTokenError:
            return TokenVerification(valid=False, reason=DenialReason.TOKEN_MALFORMED)

        payload = _to_payload(claims)
        if payload is None:
            return TokenVerification(valid=False, reason=DenialReason.TOKEN_MALFORMED)

        if (now or now_local()).timestamp() > payload.valid_until:
            return TokenVerification(valid=False, payload=payload, reason=DenialReason.TOKEN_EXPIRED)

        return TokenVerification(valid=True, payload=payload)

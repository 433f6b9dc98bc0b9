from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import now_local
from ..core.enums import MealType
from ..core.exceptions import ValidationError
from ..users.repository import UserRepository
from .codec import QRTokenCodec
from .model import TokenVerification
from .render import render_png


@dataclass(frozen=True)
class IssuedToken:
    token: str
    user_id: int
    meal_type: MealType
    valid_until: datetime


class QRService:
    def __init__(self, codec: QRTokenCodec, users: UserRepository):
        self._codec = codec
        self._users = users

    def issue_for_user(self, user_id: int, meal_type: MealType, *, now: Optional[datetime] = None) -> IssuedToken:
        user = self._users.get_by_id(int(user_id))
        if not user or not user.is_active:
            raise ValidationError("User not found")

        token = self._codec.issue(user.user_id, meal_type, now=now or now_local())
        payload = self._codec.decode(token)
        return IssuedToken(token=token, user_id=user.user_id, meal_type=meal_type, valid_until=payload.valid_until_dt)

    def verify(self, token: str, *, now: Optional[datetime] = None) -> TokenVerification:
        return self._codec.verify(token, now=now)

    def render(self, token: str) -> bytes:
        return render_png(token)

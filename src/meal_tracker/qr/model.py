from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import from_epoch_seconds
from ..core.enums import DenialReason, MealType


@dataclass(frozen=True)
class QRPayload:
    """Claims carried by a meal QR code. `version` tags the schema; times are epoch seconds."""

    version: int
    user_id: int
    meal_type: MealType
    issued_at: int
    valid_until: int
    nonce: str

    @property
    def issued_at_dt(self) -> datetime:
        return from_epoch_seconds(self.issued_at)

    @property
    def valid_until_dt(self) -> datetime:
        return from_epoch_seconds(self.valid_until)


@dataclass(frozen=True)
class TokenVerification:
    valid: bool
    payload: Optional[QRPayload] = None
    reason: Optional[DenialReason] = None

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import now_local
from ..core.enums import DenialReason, MealType
from ..meals.model import MealDecision, MealRecord, record_to_dict
from ..meals.service import MealService
from ..qr.codec import QRTokenCodec
from ..security.service import ScanGuard
from ..users.service import DeviceService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanResult:
    success: bool
    reason: Optional[DenialReason] = None
    user_id: Optional[int] = None
    meal_type: Optional[MealType] = None
    record: Optional[MealRecord] = None

    @classmethod
    def from_decision(cls, user_id: int, decision: MealDecision) -> "ScanResult":
        return cls(
            success=decision.success,
            reason=decision.reason,
            user_id=user_id,
            meal_type=decision.meal_type,
            record=decision.record,
        )

    def to_dict(self) -> dict:
        out: dict = {"success": self.success}
        if self.reason is not None:
            out["reason"] = self.reason.value
        if self.user_id is not None:
            out["userId"] = self.user_id
        if self.meal_type is not None:
            out["mealType"] = self.meal_type.value
        if self.record is not None:
            out["record"] = record_to_dict(self.record)
        return out


class ScanService:
    """Request flow for a scanned QR token or a device-session meal claim.

    Every attempt, accepted or rejected, lands in the scan audit log.
    """

    def __init__(self, codec: QRTokenCodec, guard: ScanGuard, devices: DeviceService, meals: MealService):
        self._codec = codec
        self._guard = guard
        self._devices = devices
        self._meals = meals

    def _finish(self, result: ScanResult, device_fingerprint: str, now: datetime, ip_address: Optional[str]) -> ScanResult:
        self._guard.record_attempt(device_fingerprint, result.success, now=now, ip_address=ip_address)
        if not result.success:
            logger.info("scan rejected for device %s: %s", device_fingerprint, result.reason.value)
        return result

    def validate_scan(
        self,
        token: str,
        device_fingerprint: str,
        *,
        now: Optional[datetime] = None,
        ip_address: Optional[str] = None,
    ) -> ScanResult:
        now = now or now_local()

        if self._guard.is_rate_limited(device_fingerprint, now=now):
            return self._finish(ScanResult(success=False, reason=DenialReason.RATE_LIMITED), device_fingerprint, now, ip_address)

        verification = self._codec.verify(token, now=now)
        if not verification.valid:
            return self._finish(ScanResult(success=False, reason=verification.reason), device_fingerprint, now, ip_address)

        payload = verification.payload
        device = self._devices.find_device(device_fingerprint)
        if device and device.user_id != payload.user_id:
            result = ScanResult(
                success=False,
                reason=DenialReason.DEVICE_MISMATCH,
                user_id=payload.user_id,
                meal_type=payload.meal_type,
            )
            return self._finish(result, device_fingerprint, now, ip_address)

        decision = self._meals.take_meal(
            payload.user_id,
            payload.meal_type,
            device_fingerprint=device_fingerprint,
            now=now,
        )
        return self._finish(ScanResult.from_decision(payload.user_id, decision), device_fingerprint, now, ip_address)

    def take_meal_with_device(
        self,
        user_id: int,
        meal_type: MealType,
        device_fingerprint: str,
        *,
        now: Optional[datetime] = None,
        ip_address: Optional[str] = None,
    ) -> ScanResult:
        """Meal claim from a logged-in session on the user's registered device."""

        now = now or now_local()

        device = self._devices.find_device(device_fingerprint)
        if not device or device.user_id != int(user_id):
            result = ScanResult(success=False, reason=DenialReason.DEVICE_MISMATCH, user_id=int(user_id), meal_type=meal_type)
            return self._finish(result, device_fingerprint, now, ip_address)

        if self._guard.is_rate_limited(device_fingerprint, now=now):
            result = ScanResult(success=False, reason=DenialReason.RATE_LIMITED, user_id=int(user_id), meal_type=meal_type)
            return self._finish(result, device_fingerprint, now, ip_address)

        decision = self._meals.take_meal(int(user_id), meal_type, device_fingerprint=device_fingerprint, now=now)
        return self._finish(ScanResult.from_decision(int(user_id), decision), device_fingerprint, now, ip_address)

"""Scan rate limiting.

Tracks scan attempts per device fingerprint. A device that already made
`max_attempts` scans inside the sliding window is rejected; rejected scans
are recorded too, so continued hammering keeps the device locked out.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import SCAN_RATE_LIMIT, SCAN_RATE_WINDOW_MINUTES, SCAN_RETENTION_HOURS
from .model import ScanAttempt, ScanStats
from .repository import ScanAttemptRepository

logger = logging.getLogger(__name__)


class ScanGuard:
    def __init__(
        self,
        attempts: ScanAttemptRepository,
        *,
        max_attempts: int = SCAN_RATE_LIMIT,
        window_minutes: int = SCAN_RATE_WINDOW_MINUTES,
        retention_hours: int = SCAN_RETENTION_HOURS,
    ):
        self._attempts = attempts
        self._max_attempts = int(max_attempts)
        self._window = timedelta(minutes=int(window_minutes))
        self._retention = timedelta(hours=int(retention_hours))

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def record_attempt(
        self,
        device_fingerprint: str,
        success: bool,
        *,
        now: Optional[datetime] = None,
        ip_address: Optional[str] = None,
    ) -> None:
        now = now or now_local()
        self._attempts.add(
            ScanAttempt(device_fingerprint=device_fingerprint, attempted_at=now, success=bool(success), ip_address=ip_address)
        )
        self._attempts.prune_before(now - self._retention)

    def recent_attempts(
        self,
        device_fingerprint: str,
        window: Optional[timedelta] = None,
        *,
        now: Optional[datetime] = None,
    ) -> Sequence[ScanAttempt]:
        now = now or now_local()
        return self._attempts.list_since(since=now - (window or self._window), device_fingerprint=device_fingerprint)

    def is_rate_limited(self, device_fingerprint: str, *, now: Optional[datetime] = None) -> bool:
        count = len(self.recent_attempts(device_fingerprint, now=now))
        if count >= self._max_attempts:
            logger.warning("device %s rate limited (%d attempts)", device_fingerprint, count)
            return True
        return False

    def stats(self, *, now: Optional[datetime] = None) -> ScanStats:
        now = now or now_local()
        attempts = self._attempts.list_since(since=now - self._retention)
        successful = sum(1 for a in attempts if a.success)
        return ScanStats(total=len(attempts), successful=successful, failed=len(attempts) - successful)

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ScanAttempt:
    """Audit row for one scan, kept for a rolling 24h window."""

    device_fingerprint: str
    attempted_at: datetime
    success: bool
    ip_address: Optional[str] = None


@dataclass(frozen=True)
class ScanStats:
    total: int
    successful: int
    failed: int

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import ScanAttempt


class ScanAttemptRepository(Protocol):
    def add(self, attempt: ScanAttempt) -> None:
        raise NotImplementedError

    def list_since(self, *, since: datetime, device_fingerprint: Optional[str] = None) -> Sequence[ScanAttempt]:
        """Attempts strictly after `since`, newest first; all devices when fingerprint is None."""

        raise NotImplementedError

    def prune_before(self, cutoff: datetime) -> int:
        raise NotImplementedError

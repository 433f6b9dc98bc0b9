from __future__ import annotations

from typing import Optional, Protocol

from .model import WorkSchedule


class SettingsRepository(Protocol):
    """Singleton system settings (currently only the work schedule)."""

    def get_work_schedule(self) -> Optional[WorkSchedule]:
        """Stored schedule, or None when nothing was saved yet.

        Raises ConfigurationError when the stored value cannot be parsed.
        """

        raise NotImplementedError

    def save_work_schedule(self, schedule: WorkSchedule) -> None:
        raise NotImplementedError

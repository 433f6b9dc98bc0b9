from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: Plain data object, no DB access. Users are never physically deleted;
    deactivation keeps meal history intact.
    """

    user_id: int
    full_name: str
    email: str
    password_hash: str
    role: Role
    department: Optional[str] = None
    is_active: bool = True
    is_approved: bool = False

    @property
    def can_take_meals(self) -> bool:
        return self.is_active and self.is_approved


@dataclass(frozen=True)
class DeviceInfo:
    user_agent: str
    screen_resolution: str = ""
    timezone: str = ""
    platform: str = ""
    language: str = ""


@dataclass(frozen=True)
class DeviceRegistration:
    """Binds one fingerprint to one user; superseded, never deleted."""

    device_id: int
    user_id: int
    fingerprint: str
    user_agent: Optional[str]
    screen_resolution: Optional[str]
    timezone: Optional[str]
    is_active: bool
    created_at: datetime
    last_used: Optional[datetime] = None

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import DeviceInfo, DeviceRegistration, User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): services depend on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        full_name: str,
        email: str,
        password_hash: str,
        role: Role,
        department: Optional[str],
        is_approved: bool,
    ) -> int:
        raise NotImplementedError

    def update_profile(self, user_id: int, *, full_name: str, department: Optional[str]) -> bool:
        raise NotImplementedError

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def set_approved(self, user_id: int, *, is_approved: bool) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def list_eligible(self) -> Sequence[User]:
        """Active and approved users."""

        raise NotImplementedError


class DeviceRepository(Protocol):
    def get_active_by_fingerprint(self, fingerprint: str) -> Optional[DeviceRegistration]:
        raise NotImplementedError

    def register(self, *, user_id: int, fingerprint: str, info: DeviceInfo, now: datetime) -> DeviceRegistration:
        """Deactivate the user's previous devices and insert an active one, atomically."""

        raise NotImplementedError

    def touch(self, device_id: int, *, now: datetime) -> None:
        raise NotImplementedError

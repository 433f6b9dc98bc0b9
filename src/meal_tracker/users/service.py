from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local
from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from .model import DeviceInfo, DeviceRegistration, User
from .repository import DeviceRepository, UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    full_name: str
    role: Role
    is_approved: bool


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionUser:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        return SessionUser(
            user_id=user.user_id,
            full_name=user.full_name,
            role=user.role,
            is_approved=user.is_approved,
        )


class UserService:
    """Use case: manage users (admin) and self registration."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise ValidationError("User not found")
        return user

    def create_account(
        self,
        *,
        full_name: str,
        email: str,
        password: str,
        role: Role = Role.STAFF,
        department: Optional[str] = None,
    ) -> int:
        full_name = require_non_empty(full_name, "Full name")
        email = require_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._users.get_by_email(email):
            raise ValidationError("Email is already registered")

        # Admins are always approved; staff wait for an admin.
        user_id = self._users.create_user(
            full_name=full_name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            department=(department or "").strip() or None,
            is_approved=role == Role.ADMIN,
        )
        logger.info("user %s created with role %s", user_id, role.value)
        return user_id

    def list_users(self, *, current_role: Role) -> Sequence[User]:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin permission required")
        return self._users.list_all()

    def update_profile(self, *, current_role: Role, user_id: int, full_name: str, department: Optional[str]) -> User:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin permission required")

        self.get(user_id)
        full_name = require_non_empty(full_name, "Full name")
        if not self._users.update_profile(int(user_id), full_name=full_name, department=(department or "").strip() or None):
            raise ValidationError("Updating user failed")
        return self.get(user_id)

    def set_approval(self, *, current_role: Role, user_id: int, is_approved: bool) -> User:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin permission required")

        user = self.get(user_id)
        if user.role == Role.ADMIN and not is_approved:
            raise ValidationError("Admin accounts are always approved")

        if not self._users.set_approved(user.user_id, is_approved=bool(is_approved)):
            raise ValidationError("Updating approval failed")
        logger.info("user %s approval set to %s", user.user_id, bool(is_approved))
        return self.get(user_id)

    def set_active(self, *, current_role: Role, user_id: int, is_active: bool) -> User:
        """Soft delete / restore. Users are never physically removed."""

        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin permission required")

        user = self.get(user_id)
        if user.role == Role.ADMIN and not is_active:
            raise ValidationError("Admin accounts cannot be deactivated")

        if not self._users.set_active(user.user_id, is_active=bool(is_active)):
            raise ValidationError("Updating user status failed")
        logger.info("user %s active set to %s", user.user_id, bool(is_active))
        return self.get(user_id)

    def deactivate(self, *, current_role: Role, user_id: int) -> User:
        return self.set_active(current_role=current_role, user_id=user_id, is_active=False)


def fingerprint_from(info: DeviceInfo) -> str:
    """Weak device identity derived from client environment attributes."""

    data = "|".join([info.user_agent, info.screen_resolution, info.timezone, info.platform, info.language])
    return hashlib.sha256(data.encode("utf-8")).hexdigest()[:32]


class DeviceService:
    """Use case: bind a phone/browser to a user (single active device per user)."""

    def __init__(self, devices: DeviceRepository, users: UserRepository):
        self._devices = devices
        self._users = users

    def register_device(
        self,
        *,
        user_id: int,
        info: DeviceInfo,
        fingerprint: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> DeviceRegistration:
        now = now or now_local()
        fingerprint = (fingerprint or "").strip() or fingerprint_from(info)

        user = self._users.get_by_id(int(user_id))
        if not user or not user.is_active:
            raise ValidationError("Invalid user")

        existing = self._devices.get_active_by_fingerprint(fingerprint)
        if existing and existing.user_id != user.user_id:
            raise ValidationError("This device is registered to another user")

        device = self._devices.register(user_id=user.user_id, fingerprint=fingerprint, info=info, now=now)
        logger.info("device %s registered for user %s", device.device_id, user.user_id)
        return device

    def find_device(self, fingerprint: str) -> Optional[DeviceRegistration]:
        return self._devices.get_active_by_fingerprint(fingerprint)

    def find_user_by_device(self, fingerprint: str, *, now: Optional[datetime] = None) -> Optional[User]:
        device = self._devices.get_active_by_fingerprint(fingerprint)
        if not device:
            return None
        user = self._users.get_by_id(device.user_id)
        if not user or not user.is_active:
            return None
        self._devices.touch(device.device_id, now=now or now_local())
        return user

from __future__ import annotations

import pytest

from meal_tracker.core.enums import Role
from meal_tracker.core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from meal_tracker.users.model import DeviceInfo
from meal_tracker.users.service import fingerprint_from

from fakes import TUESDAY_BREAKFAST, TUESDAY_LUNCH


def _create(container, **overrides):
    data = dict(full_name="Lan Tran", email="Lan@Example.com", password="secret1", role=Role.STAFF, department="Kitchen")
    data.update(overrides)
    return container.user_service.create_account(**data)


def test_staff_accounts_wait_for_approval(container):
    user = container.user_service.get(_create(container))

    assert user.email == "lan@example.com"
    assert user.role == Role.STAFF
    assert user.is_active
    assert not user.is_approved
    assert not user.can_take_meals


def test_admin_accounts_are_approved(container):
    user = container.user_service.get(_create(container, role=Role.ADMIN))
    assert user.is_approved


@pytest.mark.parametrize(
    "overrides",
    [
        {"full_name": "   "},
        {"email": "not-an-email"},
        {"password": "12345"},
    ],
)
def test_invalid_accounts_are_rejected(container, overrides):
    with pytest.raises(ValidationError):
        _create(container, **overrides)


def test_email_is_unique(container):
    _create(container)
    with pytest.raises(ValidationError):
        _create(container, email="lan@example.com")


def test_authenticate(container):
    _create(container)

    s_user = container.auth_service.authenticate("LAN@example.com ", "secret1")

    assert s_user.full_name == "Lan Tran"
    assert s_user.role == Role.STAFF
    assert not s_user.is_approved


@pytest.mark.parametrize("email,password", [("lan@example.com", "wrong-pw"), ("nobody@example.com", "secret1")])
def test_authenticate_rejects_bad_credentials(container, email, password):
    _create(container)
    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate(email, password)


def test_deactivated_user_cannot_log_in(container):
    user_id = _create(container)
    container.user_service.deactivate(current_role=Role.ADMIN, user_id=user_id)

    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate("lan@example.com", "secret1")


def test_admin_operations_require_admin(container):
    user_id = _create(container)

    with pytest.raises(AuthorizationError):
        container.user_service.list_users(current_role=Role.STAFF)
    with pytest.raises(AuthorizationError):
        container.user_service.set_approval(current_role=Role.STAFF, user_id=user_id, is_approved=True)
    with pytest.raises(AuthorizationError):
        container.user_service.deactivate(current_role=Role.STAFF, user_id=user_id)
    with pytest.raises(AuthorizationError):
        container.user_service.update_profile(current_role=Role.STAFF, user_id=user_id, full_name="X", department=None)


def test_approve_and_update(container):
    user_id = _create(container)

    approved = container.user_service.set_approval(current_role=Role.ADMIN, user_id=user_id, is_approved=True)
    renamed = container.user_service.update_profile(
        current_role=Role.ADMIN, user_id=user_id, full_name="Lan T.", department=" "
    )

    assert approved.can_take_meals
    assert renamed.full_name == "Lan T."
    assert renamed.department is None


def test_admin_cannot_be_deactivated_or_unapproved(container):
    admin_id = _create(container, role=Role.ADMIN)

    with pytest.raises(ValidationError):
        container.user_service.deactivate(current_role=Role.ADMIN, user_id=admin_id)
    with pytest.raises(ValidationError):
        container.user_service.set_approval(current_role=Role.ADMIN, user_id=admin_id, is_approved=False)


def test_soft_delete_and_restore(container):
    user_id = _create(container)

    container.user_service.deactivate(current_role=Role.ADMIN, user_id=user_id)
    assert not container.user_service.get(user_id).is_active

    container.user_service.set_active(current_role=Role.ADMIN, user_id=user_id, is_active=True)
    assert container.user_service.get(user_id).is_active


def test_list_users(container):
    _create(container)
    _create(container, email="second@example.com")

    users = container.user_service.list_users(current_role=Role.ADMIN)

    assert [u.email for u in users] == ["second@example.com", "lan@example.com"]


def test_fingerprint_is_stable_and_attribute_sensitive():
    info = DeviceInfo(user_agent="UA", screen_resolution="1080x2400", timezone="Asia/Ho_Chi_Minh", platform="Android", language="vi")

    assert fingerprint_from(info) == fingerprint_from(info)
    assert len(fingerprint_from(info)) == 32
    assert fingerprint_from(info) != fingerprint_from(DeviceInfo(user_agent="UA", screen_resolution="720x1600"))


def test_register_device_derives_fingerprint(repos, container):
    user = repos.users.add()
    info = DeviceInfo(user_agent="UA", screen_resolution="1080x2400")

    device = container.device_service.register_device(user_id=user.user_id, info=info, now=TUESDAY_BREAKFAST)

    assert device.fingerprint == fingerprint_from(info)
    assert device.is_active


def test_new_device_replaces_old_one(repos, container):
    user = repos.users.add()
    container.device_service.register_device(user_id=user.user_id, info=DeviceInfo("UA"), fingerprint="a", now=TUESDAY_BREAKFAST)
    container.device_service.register_device(user_id=user.user_id, info=DeviceInfo("UA"), fingerprint="b", now=TUESDAY_BREAKFAST)

    active = [d for d in repos.devices.devices.values() if d.is_active]

    assert [d.fingerprint for d in active] == ["b"]
    assert container.device_service.find_device("a") is None


def test_device_of_other_user_is_rejected(repos, container):
    owner = repos.users.add()
    other = repos.users.add()
    container.device_service.register_device(user_id=owner.user_id, info=DeviceInfo("UA"), fingerprint="a", now=TUESDAY_BREAKFAST)

    with pytest.raises(ValidationError):
        container.device_service.register_device(user_id=other.user_id, info=DeviceInfo("UA"), fingerprint="a")


def test_inactive_user_cannot_register_device(repos, container):
    user = repos.users.add(is_active=False)
    with pytest.raises(ValidationError):
        container.device_service.register_device(user_id=user.user_id, info=DeviceInfo("UA"), fingerprint="a")


def test_find_user_by_device_touches_last_used(repos, container):
    user = repos.users.add()
    device = container.device_service.register_device(
        user_id=user.user_id, info=DeviceInfo("UA"), fingerprint="a", now=TUESDAY_BREAKFAST
    )

    found = container.device_service.find_user_by_device("a", now=TUESDAY_LUNCH)

    assert found.user_id == user.user_id
    assert repos.devices.devices[device.device_id].last_used == TUESDAY_LUNCH
    assert container.device_service.find_user_by_device("unknown") is None


def test_device_of_deactivated_user_finds_nobody(repos, container):
    user = repos.users.add()
    device = container.device_service.register_device(
        user_id=user.user_id, info=DeviceInfo("UA"), fingerprint="a", now=TUESDAY_BREAKFAST
    )
    repos.users.set_active(user.user_id, is_active=False)

    assert container.device_service.find_user_by_device("a", now=TUESDAY_LUNCH) is None
    assert repos.devices.devices[device.device_id].last_used == TUESDAY_BREAKFAST

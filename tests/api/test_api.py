from __future__ import annotations

from datetime import timedelta

import pytest

from meal_tracker.core.enums import Role
from meal_tracker.main import create_app

from fakes import SUNDAY_BREAKFAST, TUESDAY_LUNCH


@pytest.fixture()
def app(monkeypatch, container, clock):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container)


@pytest.fixture()
def client(app):
    return app.test_client()


def _login(client, user):
    with client.session_transaction() as sess:
        sess["user_id"] = user.user_id
        sess["name"] = user.full_name
        sess["role"] = user.role.value


def _register_device(client, fingerprint="phone-1"):
    return client.post("/api/devices/register", json={"fingerprint": fingerprint, "deviceInfo": {"userAgent": "UA"}})


def test_login_and_logout(repos, client):
    repos.users.add("Lan", email="lan@example.com", password="secret1")

    resp = client.post("/api/login", json={"email": "lan@example.com", "password": "secret1"})

    assert resp.status_code == 200
    assert resp.get_json()["user"]["name"] == "Lan"
    with client.session_transaction() as sess:
        assert sess["role"] == "staff"

    client.post("/api/logout")
    with client.session_transaction() as sess:
        assert "user_id" not in sess


def test_login_with_wrong_password(repos, client):
    repos.users.add(email="lan@example.com", password="secret1")

    resp = client.post("/api/login", json={"email": "lan@example.com", "password": "nope"})

    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_self_registration_needs_approval(client):
    resp = client.post("/api/register", json={"name": "New", "email": "new@example.com", "password": "secret1"})

    assert resp.status_code == 201
    body = resp.get_json()["user"]
    assert body["role"] == "staff"
    assert body["isApproved"] is False


def test_self_registration_validation_error(client):
    resp = client.post("/api/register", json={"name": "New", "email": "new@example.com", "password": "123"})
    assert resp.status_code == 400


def test_current_meal_is_public(client):
    resp = client.get("/api/meals/current")
    assert resp.get_json() == {"success": True, "mealType": "breakfast"}


def test_current_meal_closed(client, clock):
    clock.now = SUNDAY_BREAKFAST
    assert client.get("/api/meals/current").get_json()["mealType"] is None


def test_credits_require_login(client):
    assert client.get("/api/meals/credits").status_code == 401


def test_credits(repos, client):
    user = repos.users.add()
    _login(client, user)

    resp = client.get("/api/meals/credits?year=2024&month=2")

    assert resp.status_code == 200
    assert resp.get_json()["credits"]["totalWorkDays"] == 25


def test_credits_bad_month(repos, client):
    _login(client, repos.users.add())
    assert client.get("/api/meals/credits?year=2024&month=13").status_code == 400
    assert client.get("/api/meals/credits?year=abc").status_code == 400


def test_take_meal_with_registered_device(repos, client):
    _login(client, repos.users.add())
    assert _register_device(client).status_code == 200

    first = client.post("/api/meals/take", json={"mealType": "breakfast", "deviceFingerprint": "phone-1"})
    second = client.post("/api/meals/take", json={"mealType": "breakfast", "deviceFingerprint": "phone-1"})

    assert first.status_code == 200
    assert first.get_json()["record"]["mealType"] == "breakfast"
    assert second.status_code == 400
    assert second.get_json()["reason"] == "ALREADY_TAKEN"

    today = client.get("/api/meals/today").get_json()
    assert today["taken"] == ["breakfast"]
    history = client.get("/api/meals/history").get_json()
    assert len(history["records"]) == 1


def test_take_meal_from_unknown_device(repos, client):
    _login(client, repos.users.add())

    resp = client.post("/api/meals/take", json={"mealType": "breakfast", "deviceFingerprint": "phone-1"})

    assert resp.status_code == 403
    assert resp.get_json()["reason"] == "DEVICE_MISMATCH"


def test_take_meal_unapproved(repos, client):
    _login(client, repos.users.add(is_approved=False))
    _register_device(client)

    resp = client.post("/api/meals/take", json={"mealType": "breakfast", "deviceFingerprint": "phone-1"})

    assert resp.status_code == 403
    assert resp.get_json()["reason"] == "USER_NOT_APPROVED"


def test_take_meal_rejects_unknown_meal(repos, client):
    _login(client, repos.users.add())
    resp = client.post("/api/meals/take", json={"mealType": "dinner", "deviceFingerprint": "phone-1"})
    assert resp.status_code == 400


def test_device_taken_by_someone_else(repos, client):
    owner = repos.users.add()
    _login(client, owner)
    _register_device(client)

    _login(client, repos.users.add())
    resp = _register_device(client)

    assert resp.status_code == 400


def test_qr_issue_render_and_validate(repos, client, clock):
    user = repos.users.add()
    clock.now = TUESDAY_LUNCH
    _login(client, user)

    issued = client.post("/api/qr/issue", json={"mealType": "lunch"}).get_json()
    image = client.get(f"/api/qr/{issued['token']}.png")
    scanned = client.post("/api/qr/validate", json={"token": issued["token"], "deviceFingerprint": "kiosk-1"})

    assert issued["userId"] == user.user_id
    assert image.status_code == 200
    assert image.mimetype == "image/png"
    assert image.data.startswith(b"\x89PNG")
    assert scanned.status_code == 200
    assert scanned.get_json()["success"] is True


def test_qr_issue_for_someone_else_needs_admin(repos, client):
    other = repos.users.add()
    _login(client, repos.users.add())

    resp = client.post("/api/qr/issue", json={"mealType": "lunch", "userId": other.user_id})

    assert resp.status_code == 403


def test_qr_validate_expired(repos, client, clock):
    user = repos.users.add()
    clock.now = TUESDAY_LUNCH
    _login(client, user)
    token = client.post("/api/qr/issue", json={"mealType": "lunch"}).get_json()["token"]

    clock.now = TUESDAY_LUNCH + timedelta(minutes=31)
    resp = client.post("/api/qr/validate", json={"token": token, "deviceFingerprint": "kiosk-1"})

    assert resp.status_code == 400
    assert resp.get_json()["reason"] == "TOKEN_EXPIRED"


def test_qr_validate_rate_limited(client):
    for _ in range(10):
        client.post("/api/qr/validate", json={"token": "garbage", "deviceFingerprint": "kiosk-1"})

    resp = client.post("/api/qr/validate", json={"token": "garbage", "deviceFingerprint": "kiosk-1"})

    assert resp.status_code == 429
    assert resp.get_json()["reason"] == "RATE_LIMITED"


def test_qr_validate_requires_fields(client):
    assert client.post("/api/qr/validate", json={"token": "x"}).status_code == 400


def test_admin_endpoints_reject_staff(repos, client):
    _login(client, repos.users.add())

    assert client.get("/api/admin/stats").status_code == 403
    assert client.post("/api/admin/refresh-credits", json={}).status_code == 403
    assert client.get("/api/admin/users").status_code == 403


def test_admin_schedule_roundtrip(repos, client):
    _login(client, repos.users.add(role=Role.ADMIN))
    schedule = client.get("/api/admin/schedule").get_json()["schedule"]
    schedule["workDays"] = [1, 2, 3, 4, 5]

    saved = client.put("/api/admin/schedule", json=schedule)
    bad = client.put("/api/admin/schedule", json=dict(schedule, lunchStart="15:00"))

    assert saved.status_code == 200
    assert repos.settings.schedule.work_days == frozenset({1, 2, 3, 4, 5})
    assert bad.status_code == 400


def test_admin_refresh_and_force_meal(repos, client, clock):
    admin = repos.users.add(role=Role.ADMIN)
    staff = repos.users.add()
    clock.now = SUNDAY_BREAKFAST
    _login(client, admin)

    refreshed = client.post("/api/admin/refresh-credits", json={}).get_json()
    forced = client.post("/api/admin/force-meal", json={"userId": staff.user_id, "mealType": "lunch"})
    stats = client.get("/api/admin/stats").get_json()["stats"]

    assert refreshed["refreshed"] == 2
    assert forced.status_code == 200
    assert forced.get_json()["record"]["forced"] is True
    assert stats["todayLunch"] == 1


def test_admin_refresh_past_month(repos, client):
    _login(client, repos.users.add(role=Role.ADMIN))
    resp = client.post("/api/admin/refresh-credits", json={"year": 2023, "month": 12})
    assert resp.status_code == 400


def test_admin_user_management(repos, client):
    _login(client, repos.users.add(role=Role.ADMIN))

    created = client.post(
        "/api/admin/users", json={"name": "Minh", "email": "minh@example.com", "password": "secret1"}
    ).get_json()["data"]
    approved = client.post(f"/api/admin/users/{created['id']}/approval", json={"isApproved": True}).get_json()["data"]
    deactivated = client.post(f"/api/admin/users/{created['id']}/active", json={"isActive": False}).get_json()["data"]
    users = client.get("/api/admin/users").get_json()["data"]

    assert created["isApproved"] is False
    assert approved["isApproved"] is True
    assert deactivated["isActive"] is False
    assert {u["email"] for u in users} >= {"minh@example.com"}
    assert client.post(f"/api/admin/users/{created['id']}/approval", json={"isApproved": "yes"}).status_code == 400


def test_scan_stats(repos, client):
    client.post("/api/qr/validate", json={"token": "garbage", "deviceFingerprint": "kiosk-1"})
    _login(client, repos.users.add(role=Role.ADMIN))

    stats = client.get("/api/admin/scan-stats").get_json()["stats"]

    assert stats == {"total": 1, "successful": 0, "failed": 1}


def test_device_check_for_registered_device(repos, client):
    user = repos.users.add("Lan", department="Kitchen")
    _login(client, user)
    _register_device(client)
    client.post("/api/logout")

    body = client.get("/api/device-check?fingerprint=phone-1").get_json()

    assert body["isRegistered"] is True
    assert body["user"] == {"id": user.user_id, "name": "Lan", "department": "Kitchen"}


def test_device_check_for_unknown_or_deactivated_user(repos, client):
    user = repos.users.add()
    _login(client, user)
    _register_device(client)
    repos.users.set_active(user.user_id, is_active=False)

    assert client.get("/api/device-check?fingerprint=phone-1").get_json() == {"success": True, "isRegistered": False}
    assert client.get("/api/device-check?fingerprint=other").get_json()["isRegistered"] is False
    assert client.get("/api/device-check").status_code == 400


def test_device_login_starts_a_session(repos, client):
    user = repos.users.add()
    _login(client, user)
    _register_device(client)
    client.post("/api/logout")

    resp = client.post("/api/devices/login", json={"fingerprint": "phone-1"})

    assert resp.status_code == 200
    assert resp.get_json()["user"]["id"] == user.user_id
    with client.session_transaction() as sess:
        assert sess["user_id"] == user.user_id
    assert client.get("/api/meals/credits").status_code == 200


def test_device_login_refused_for_deactivated_user(repos, client):
    user = repos.users.add()
    _login(client, user)
    _register_device(client)
    client.post("/api/logout")
    repos.users.set_active(user.user_id, is_active=False)

    resp = client.post("/api/devices/login", json={"fingerprint": "phone-1"})

    assert resp.status_code == 401
    with client.session_transaction() as sess:
        assert "user_id" not in sess


def test_meal_counts_against_monthly_limits(repos, client):
    _login(client, repos.users.add())
    _register_device(client)
    client.post("/api/meals/take", json={"mealType": "breakfast", "deviceFingerprint": "phone-1"})

    counts = client.get("/api/meals/counts").get_json()["counts"]

    assert (counts["year"], counts["month"]) == (2024, 1)
    assert counts["breakfast"] == 1
    assert counts["limits"] == {"breakfast": 22, "lunch": 22}
    assert counts["remaining"] == {"breakfast": 21, "lunch": 22}


def test_qr_image_needs_a_genuine_unexpired_token(repos, client, clock):
    user = repos.users.add()
    clock.now = TUESDAY_LUNCH
    _login(client, user)
    token = client.post("/api/qr/issue", json={"mealType": "lunch"}).get_json()["token"]
    header, claims, signature = token.split(".")
    forged = f"{header}.{claims}.{'A' if signature[0] != 'A' else 'B'}{signature[1:]}"

    assert client.get(f"/api/qr/{forged}.png").status_code == 400
    clock.now = TUESDAY_LUNCH + timedelta(minutes=31)
    assert client.get(f"/api/qr/{token}.png").status_code == 400


def test_qr_image_of_someone_else_needs_admin(repos, client, clock):
    owner = repos.users.add()
    clock.now = TUESDAY_LUNCH
    _login(client, owner)
    token = client.post("/api/qr/issue", json={"mealType": "lunch"}).get_json()["token"]

    _login(client, repos.users.add())
    assert client.get(f"/api/qr/{token}.png").status_code == 403
    _login(client, repos.users.add(role=Role.ADMIN))
    assert client.get(f"/api/qr/{token}.png").status_code == 200

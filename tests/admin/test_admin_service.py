from __future__ import annotations

from datetime import datetime

import pytest

from meal_tracker.core.enums import DenialReason, MealType, Role
from meal_tracker.core.exceptions import AuthorizationError

from fakes import SUNDAY_BREAKFAST, TUESDAY_BREAKFAST, TUESDAY_LUNCH


def test_admin_only(container):
    admin = container.admin_service
    with pytest.raises(AuthorizationError):
        admin.refresh_credits(current_role=Role.STAFF, now=TUESDAY_BREAKFAST)
    with pytest.raises(AuthorizationError):
        admin.force_meal(current_role=Role.STAFF, user_id=1, meal_type=MealType.LUNCH, now=TUESDAY_BREAKFAST)
    with pytest.raises(AuthorizationError):
        admin.dashboard_stats(current_role=Role.STAFF, now=TUESDAY_BREAKFAST)
    with pytest.raises(AuthorizationError):
        admin.scan_stats(current_role=Role.STAFF, now=TUESDAY_BREAKFAST)


def test_refresh_credits_defaults_to_current_month(repos, container):
    repos.users.add()

    report = container.admin_service.refresh_credits(current_role=Role.ADMIN, now=TUESDAY_BREAKFAST)

    assert (report.year, report.month, report.refreshed) == (2024, 1, 1)


def test_force_meal_outside_window(repos, container):
    user = repos.users.add()

    decision = container.admin_service.force_meal(
        current_role=Role.ADMIN, user_id=user.user_id, meal_type=MealType.BREAKFAST, now=SUNDAY_BREAKFAST
    )

    assert decision.success
    assert decision.record.forced


def test_force_meal_respects_user_status(repos, container):
    user = repos.users.add(is_approved=False)

    decision = container.admin_service.force_meal(
        current_role=Role.ADMIN, user_id=user.user_id, meal_type=MealType.LUNCH, now=TUESDAY_LUNCH
    )

    assert decision.reason == DenialReason.USER_NOT_APPROVED


def test_dashboard_stats(repos, container):
    first = repos.users.add()
    second = repos.users.add()
    repos.users.add(is_approved=False)
    repos.users.add(is_active=False)

    container.meal_service.take_meal(first.user_id, now=datetime(2024, 1, 1, 9, 0))
    container.meal_service.take_meal(first.user_id, now=TUESDAY_BREAKFAST)
    container.meal_service.take_meal(second.user_id, now=TUESDAY_BREAKFAST)
    container.meal_service.take_meal(second.user_id, now=TUESDAY_LUNCH)

    stats = container.admin_service.dashboard_stats(current_role=Role.ADMIN, now=TUESDAY_LUNCH)

    assert (stats.today_breakfast, stats.today_lunch) == (2, 1)
    assert (stats.monthly_breakfast, stats.monthly_lunch) == (3, 1)
    assert (stats.total_users, stats.active_users, stats.pending_approval) == (4, 3, 1)
    assert stats.recent_activities[0].taken_at == TUESDAY_LUNCH
    assert len(stats.recent_activities) == 4


def test_scan_stats(repos, container):
    container.scan_service.validate_scan("garbage", "kiosk-1", now=TUESDAY_LUNCH)

    stats = container.admin_service.scan_stats(current_role=Role.ADMIN, now=TUESDAY_LUNCH)

    assert (stats.total, stats.successful, stats.failed) == (1, 0, 1)

from __future__ import annotations

import importlib
from dataclasses import dataclass
from datetime import datetime

import pytest

from meal_tracker.container import Container, build_services

from fakes import (
    TUESDAY_BREAKFAST,
    InMemoryCredits,
    InMemoryDevices,
    InMemoryMeals,
    InMemoryScanAttempts,
    InMemorySettings,
    InMemoryUsers,
)

QR_SECRET = "test-qr-secret-with-thirty-two-bytes"


_CLOCK_MODULES = (
    "meal_tracker.admin.service",
    "meal_tracker.credits.service",
    "meal_tracker.meals.service",
    "meal_tracker.qr.codec",
    "meal_tracker.qr.service",
    "meal_tracker.scan.service",
    "meal_tracker.schedule.service",
    "meal_tracker.security.service",
    "meal_tracker.users.service",
)


@dataclass
class Repos:
    users: InMemoryUsers
    devices: InMemoryDevices
    meals: InMemoryMeals
    credits: InMemoryCredits
    settings: InMemorySettings
    scan_attempts: InMemoryScanAttempts


@pytest.fixture()
def repos() -> Repos:
    return Repos(
        users=InMemoryUsers(),
        devices=InMemoryDevices(),
        meals=InMemoryMeals(),
        credits=InMemoryCredits(),
        settings=InMemorySettings(),
        scan_attempts=InMemoryScanAttempts(),
    )


@pytest.fixture()
def container(repos: Repos) -> Container:
    return build_services(
        users_repo=repos.users,
        devices_repo=repos.devices,
        meals_repo=repos.meals,
        credits_repo=repos.credits,
        settings_repo=repos.settings,
        scan_attempts_repo=repos.scan_attempts,
        qr_secret=QR_SECRET,
    )


class Clock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def clock(monkeypatch) -> Clock:
    """Freeze now_local() everywhere it is used; tests move `clock.now`."""

    c = Clock(TUESDAY_BREAKFAST)
    for name in _CLOCK_MODULES:
        monkeypatch.setattr(importlib.import_module(name), "now_local", c)
    return c

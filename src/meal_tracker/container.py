from __future__ import annotations

from dataclasses import dataclass

from .admin.service import AdminService
from .core.constants import QR_TOKEN_TTL_MINUTES, SCAN_RATE_LIMIT, SCAN_RATE_WINDOW_MINUTES
from .credits.mysql_credit_repository import MySQLCreditRepository
from .credits.repository import CreditRepository
from .credits.service import CreditLedger
from .database.connection import DBConfig, DatabaseConnection
from .meals.mysql_meal_repository import MySQLMealRepository
from .meals.repository import MealRepository
from .meals.service import MealService
from .qr.codec import QRTokenCodec
from .qr.service import QRService
from .scan.service import ScanService
from .schedule.mysql_settings_repository import MySQLSettingsRepository
from .schedule.repository import SettingsRepository
from .schedule.service import ScheduleService
from .security.mysql_scan_attempt_repository import MySQLScanAttemptRepository
from .security.repository import ScanAttemptRepository
from .security.service import ScanGuard
from .users.mysql_device_repository import MySQLDeviceRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import DeviceRepository, UserRepository
from .users.service import AuthService, DeviceService, UserService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    devices_repo: DeviceRepository
    meals_repo: MealRepository
    credits_repo: CreditRepository
    settings_repo: SettingsRepository
    scan_attempts_repo: ScanAttemptRepository

    auth_service: AuthService
    user_service: UserService
    device_service: DeviceService
    schedule_service: ScheduleService
    credit_ledger: CreditLedger
    meal_service: MealService
    qr_service: QRService
    scan_guard: ScanGuard
    scan_service: ScanService
    admin_service: AdminService


def build_services(
    *,
    users_repo: UserRepository,
    devices_repo: DeviceRepository,
    meals_repo: MealRepository,
    credits_repo: CreditRepository,
    settings_repo: SettingsRepository,
    scan_attempts_repo: ScanAttemptRepository,
    qr_secret: str,
    qr_ttl_minutes: int = QR_TOKEN_TTL_MINUTES,
    scan_rate_limit: int = SCAN_RATE_LIMIT,
    scan_rate_window_minutes: int = SCAN_RATE_WINDOW_MINUTES,
) -> Container:
    """Wire services on top of any repository implementation."""

    schedule_service = ScheduleService(settings_repo)
    credit_ledger = CreditLedger(credits_repo, meals_repo, users_repo, schedule_service)
    meal_service = MealService(meals_repo, users_repo, schedule_service, credit_ledger)
    device_service = DeviceService(devices_repo, users_repo)

    codec = QRTokenCodec(qr_secret, ttl_minutes=qr_ttl_minutes)
    scan_guard = ScanGuard(
        scan_attempts_repo,
        max_attempts=scan_rate_limit,
        window_minutes=scan_rate_window_minutes,
    )

    return Container(
        users_repo=users_repo,
        devices_repo=devices_repo,
        meals_repo=meals_repo,
        credits_repo=credits_repo,
        settings_repo=settings_repo,
        scan_attempts_repo=scan_attempts_repo,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo),
        device_service=device_service,
        schedule_service=schedule_service,
        credit_ledger=credit_ledger,
        meal_service=meal_service,
        qr_service=QRService(codec, users_repo),
        scan_guard=scan_guard,
        scan_service=ScanService(codec, scan_guard, device_service, meal_service),
        admin_service=AdminService(credit_ledger, meal_service, meals_repo, users_repo, scan_guard),
    )


def build_container(*, db_config: dict, settings: object) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return build_services(
        users_repo=MySQLUserRepository(conn),
        devices_repo=MySQLDeviceRepository(conn),
        meals_repo=MySQLMealRepository(conn),
        credits_repo=MySQLCreditRepository(conn),
        settings_repo=MySQLSettingsRepository(conn),
        scan_attempts_repo=MySQLScanAttemptRepository(conn),
        qr_secret=str(getattr(settings, "QR_SECRET")),
        qr_ttl_minutes=int(getattr(settings, "QR_TOKEN_TTL_MINUTES", QR_TOKEN_TTL_MINUTES)),
        scan_rate_limit=int(getattr(settings, "SCAN_RATE_LIMIT", SCAN_RATE_LIMIT)),
        scan_rate_window_minutes=int(getattr(settings, "SCAN_RATE_WINDOW_MINUTES", SCAN_RATE_WINDOW_MINUTES)),
    )

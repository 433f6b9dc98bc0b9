"""Example: drive the service layer directly (no Flask).

Controllers stay thin; the meal rules live in the services.
"""

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path[:0] = [str(REPO_ROOT), str(REPO_ROOT / "src")]

from config import get_settings_module

from meal_tracker.container import build_container
from meal_tracker.core.enums import MealType


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)

    print("current meal:", container.schedule_service.current_meal())
    print(container.credit_ledger.get_monthly_credits(user_id=1).to_dict())

    issued = container.qr_service.issue_for_user(1, MealType.LUNCH)
    print(container.qr_service.verify(issued.token))


if __name__ == "__main__":
    main()

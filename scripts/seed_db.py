from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from config import get_settings_module

from meal_tracker.credits.service import CreditLedger
from meal_tracker.container import build_container
from meal_tracker.database.bootstrap import DEMO_USERS, ensure_demo_users


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    ensure_demo_users(db_config)

    # Seed this month's allotments so the dashboard has numbers right away.
    ledger: CreditLedger = build_container(db_config=db_config, settings=settings).credit_ledger
    report = ledger.refresh_all()

    print(
        "OK: Seeded database -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(users={len(DEMO_USERS)}, credits refreshed={report.refreshed}, failed={report.failed})"
    )


if __name__ == "__main__":
    main()

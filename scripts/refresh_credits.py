"""Recompute meal credits for every active, approved user.

Meant for a scheduler on the first day of each month:
    python scripts/refresh_credits.py [--year 2025 --month 3]
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from config import get_settings_module

from meal_tracker.container import build_container
from meal_tracker.main import configure_logging


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--year", type=int)
    parser.add_argument("--month", type=int)
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(db_config=dict(settings.DB_CONFIG), settings=settings)
    report = container.credit_ledger.refresh_all(args.year, args.month)

    print(f"OK: {report.year:04d}-{report.month:02d} refreshed={report.refreshed} failed={report.failed}")
    return 1 if report.failed else 0


if __name__ == "__main__":
    sys.exit(main())

from __future__ import annotations

from datetime import date, datetime

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def sunday_based_weekday(value: date) -> int:
    """Weekday index with 0=Sunday .. 6=Saturday (Python uses 0=Monday)."""
    return (value.weekday() + 1) % 7


def minute_of_day(value: datetime) -> int:
    return value.hour * 60 + value.minute


def parse_hhmm(value: str) -> int:
    """Parse "HH:MM" into minute-of-day."""
    try:
        parsed = datetime.strptime((value or "").strip(), "%H:%M")
    except ValueError:
        raise ValidationError(f"Invalid time (HH:MM): {value!r}")
    return parsed.hour * 60 + parsed.minute


def format_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def to_epoch_seconds(value: datetime) -> int:
    return int(value.timestamp())


def from_epoch_seconds(value: int) -> datetime:
    return datetime.fromtimestamp(value)

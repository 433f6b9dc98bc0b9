"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

QR_TOKEN_TTL_MINUTES = 30
QR_PAYLOAD_VERSION = 1

SCAN_RATE_LIMIT = 10
SCAN_RATE_WINDOW_MINUTES = 5
SCAN_RETENTION_HOURS = 24

DEFAULT_WORK_DAYS = (1, 2, 3, 4, 5, 6)
DEFAULT_BREAKFAST_WINDOW = ("07:00", "10:30")
DEFAULT_LUNCH_WINDOW = ("11:30", "14:30")
DEFAULT_MONTHLY_LIMIT = 22

DEFAULT_HISTORY_LIMIT = 30
DEFAULT_RECENT_ACTIVITY = 10
MIN_PASSWORD_LENGTH = 6

WORK_SCHEDULE_SETTING_KEY = "work-schedule"

import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "meal_tracker_test"),
}

QR_SECRET = "test-qr-secret-with-thirty-two-bytes"
QR_TOKEN_TTL_MINUTES = 30

SCAN_RATE_LIMIT = 10
SCAN_RATE_WINDOW_MINUTES = 5

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
